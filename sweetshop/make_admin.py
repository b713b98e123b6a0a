"""Promote a registered user to admin.

    python -m sweetshop.make_admin someone@example.com

Works against the configured MongoDB (STORE_BACKEND=mongo). The in-memory
backend lives inside the server process, so there is nothing to promote from
the outside.
"""

import argparse
import sys

from rich.console import Console
from rich.panel import Panel

from .auth import AuthService
from .config import STORE_BACKEND
from .database import build_stores
from .errors import SweetShopError

console = Console()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Give a user the admin role")
    parser.add_argument("email", help="Email the user registered with")
    args = parser.parse_args(argv)

    if STORE_BACKEND != "mongo":
        console.print("[red]make_admin needs STORE_BACKEND=mongo[/red]")
        return 1

    _, users, client = build_stores(STORE_BACKEND)
    try:
        user = AuthService(users).promote(args.email)
    except SweetShopError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        return 1
    finally:
        if client is not None:
            client.close()

    console.print(Panel.fit(
        f"📧 Email: [bold]{user.email}[/bold]\n"
        f"👤 Name: {user.name}\n"
        f"👑 Role: [green]{user.role.value}[/green]",
        title="✅ User updated to admin",
    ))
    return 0


if __name__ == "__main__":
    sys.exit(main())
