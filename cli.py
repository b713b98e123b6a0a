# cli.py
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

import requests
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.sweetclient import SweetShopClient, DEFAULT_BASE_URL, response_body

console = Console()
c = SweetShopClient(base_url=DEFAULT_BASE_URL)

CATEGORIES = ["Chocolate", "Candy", "Gummy", "Lollipop", "Hard Candy", "Soft Candy", "Other"]

status_message = "Ready"
sweet_cache: List[Dict[str, Any]] = []
current_user: Optional[Dict[str, Any]] = None

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_sweets(sweets: List[Dict[str, Any]]):
    if not sweets:
        console.print("[italic yellow]No sweets found[/italic yellow]")
        return

    table = Table(
        title="🍬 Sweets",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=26)
    table.add_column("Name", style="bold", width=22)
    table.add_column("Category", width=12)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Qty", justify="right", width=6)
    table.add_column("Stock", width=10)

    for s in sweets:
        stock = "[green]in stock[/green]" if s.get("inStock") else "[red]sold out[/red]"
        table.add_row(
            s.get("id", "N/A"),
            s.get("name", "N/A"),
            s.get("category", "N/A"),
            f"${s.get('price', 0):.2f}",
            str(s.get("quantity", 0)),
            stock,
        )
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def _error_message(e: Exception) -> str:
    # API errors carry {"success": false, "message": ...}
    response = getattr(e, "response", None)
    if response is not None:
        try:
            return response.json().get("message", str(e))
        except ValueError:
            return f"HTTP {response.status_code}"
    return str(e)


def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns the result, or None after printing the error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except requests.exceptions.RequestException as e:
        status_message = f"Error: {_error_message(e)}"
        console.print(show_status(status_message, False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def get_sweet_completer():
    global sweet_cache
    if not sweet_cache:
        sweet_cache = try_api(c.list_sweets) or []
    ids = [s.get("id", "") for s in sweet_cache]
    names = [s.get("name", "") for s in sweet_cache]
    return WordCompleter([x for x in ids + names if x], ignore_case=True)


def resolve_sweet_id(raw: str) -> str:
    # Accept a name from the completer as well as an id.
    for s in sweet_cache:
        if s.get("name", "").lower() == raw.lower():
            return s["id"]
    return raw


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    who = current_user["email"] if current_user else "anonymous"
    header.add_row(
        "🍭 Sweet Shop",
        f"[bold blue]Inventory CLI[/bold blue] [dim]({who})[/dim]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 1.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


# ---------------------------
# Actions
# ---------------------------
def do_purchase():
    raw = prompt_with_autocomplete("Sweet ID or name", completer=get_sweet_completer())
    sid = resolve_sweet_id(raw.strip())
    qty = IntPrompt.ask("Quantity", default=1)
    r = try_api(c.purchase, sid, qty)
    if r is None:
        return
    body = response_body(r)
    if r.status_code == 200 and "data" in body:
        sweet = body["data"]
        console.print(Panel.fit(
            f"[green]Bought {qty} x {sweet['name']}[/green]\n"
            f"Left in stock: [bold]{sweet['quantity']}[/bold]",
            title="✅ Purchase"
        ))
    else:
        console.print(Panel.fit(f"[red]{body.get('message', body)}[/red]", title="❌ Purchase failed"))


def do_login():
    global current_user
    email = prompt_with_autocomplete("Email")
    password = Prompt.ask("Password", password=True)
    resp = try_api(c.login, email, password, success_msg=f"Logged in as {email}")
    if resp:
        current_user = resp["user"]


def do_register():
    global current_user
    name = prompt_with_autocomplete("Name")
    email = prompt_with_autocomplete("Email")
    password = Prompt.ask("Password (min 6 chars)", password=True)
    resp = try_api(c.register, name, email, password, success_msg=f"Registered {email}")
    if resp:
        current_user = resp["user"]


def do_create():
    global sweet_cache
    name = prompt_with_autocomplete("Sweet name")
    category = prompt_with_autocomplete("🏷️ Category", completer=WordCompleter(CATEGORIES), default="Candy")
    price = ask_float("💰 Price in dollars", default=1.0)
    qty = IntPrompt.ask("📦 Quantity", default=10)
    description = prompt_with_autocomplete("Description (optional)") or None
    sweet = try_api(c.create_sweet, name, category, price, qty, description,
                    success_msg=f"Sweet '{name}' created")
    if sweet:
        show_sweets([sweet])
        sweet_cache = []


def do_update():
    global sweet_cache
    sid = resolve_sweet_id(prompt_with_autocomplete("Sweet ID or name", completer=get_sweet_completer()).strip())
    changes: Dict[str, Any] = {}
    if Confirm.ask("Change price?", default=False):
        changes["price"] = ask_float("💰 New price")
    if Confirm.ask("Change quantity?", default=True):
        changes["quantity"] = IntPrompt.ask("📦 New quantity", default=0)
    if not changes:
        return
    sweet = try_api(c.update_sweet, sid, success_msg="Sweet updated", **changes)
    if sweet:
        show_sweets([sweet])
        sweet_cache = []


def do_delete():
    global sweet_cache
    sid = resolve_sweet_id(prompt_with_autocomplete("Sweet ID or name", completer=get_sweet_completer()).strip())
    if Confirm.ask(f"[red]Delete {sid}?[/red]"):
        try_api(c.delete_sweet, sid, success_msg=f"Sweet {sid} deleted")
        sweet_cache = []


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global sweet_cache

    console.clear()
    console.print(create_header())
    sweet_cache = try_api(c.list_sweets) or []

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "🍬 List sweets", "6", "🔐 Login"),
            ("2", "✅ List sweets in stock", "7", "📝 Register"),
            ("3", "🔍 Search sweets", "8", "➕ Add sweet (admin)"),
            ("4", "ℹ️ Get sweet by ID", "9", "✏️ Update sweet (admin)"),
            ("5", "🛒 Purchase", "10", "🗑️ Delete sweet (admin)"),
            ("", "", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 11)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            sweets = try_api(c.list_sweets, success_msg="Sweets loaded")
            if sweets is not None:
                sweet_cache = sweets
                show_sweets(sweets)

        elif choice == "2":
            sweets = try_api(c.list_sweets, None, True, success_msg="In-stock sweets loaded")
            if sweets is not None:
                show_sweets(sweets)

        elif choice == "3":
            term = prompt_with_autocomplete("Enter search term")
            res = try_api(c.search_sweets, term, success_msg=f"Search for '{term}' completed")
            if res is not None:
                show_sweets(res)

        elif choice == "4":
            sid = resolve_sweet_id(prompt_with_autocomplete("Sweet ID", completer=get_sweet_completer()).strip())
            sweet = try_api(c.get_sweet, sid)
            if sweet:
                show_sweets([sweet])

        elif choice == "5":
            do_purchase()

        elif choice == "6":
            do_login()

        elif choice == "7":
            do_register()

        elif choice == "8":
            do_create()

        elif choice == "9":
            do_update()

        elif choice == "10":
            do_delete()

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Bye! 🍭[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
