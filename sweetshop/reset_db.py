"""Empty the sweets and users collections.

    python -m sweetshop.reset_db --yes

Works against the configured MongoDB (STORE_BACKEND=mongo) only. Admins have
to be promoted again with make_admin afterwards.
"""

import argparse
import sys

from rich.console import Console
from rich.panel import Panel

from .config import MONGO_DB, STORE_BACKEND
from .database import build_stores
from .errors import SweetShopError

console = Console()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Delete every sweet and user")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation check")
    parser.add_argument("--keep-users", action="store_true", help="Only clear the sweets")
    args = parser.parse_args(argv)

    if STORE_BACKEND != "mongo":
        console.print("[red]reset_db needs STORE_BACKEND=mongo[/red]")
        return 1
    if not args.yes:
        console.print(f"[yellow]This wipes database '{MONGO_DB}'. Re-run with --yes.[/yellow]")
        return 1

    inventory, users, client = build_stores(STORE_BACKEND)
    try:
        inventory.clear()
        if not args.keep_users:
            users.clear()
    except SweetShopError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        return 1
    finally:
        if client is not None:
            client.close()

    cleared = "sweets" if args.keep_users else "sweets, users"
    console.print(Panel.fit(
        f"🗄️ Database: [bold]{MONGO_DB}[/bold]\n"
        f"🧹 Cleared: {cleared}",
        title="✅ Database reset",
    ))
    return 0


if __name__ == "__main__":
    sys.exit(main())
