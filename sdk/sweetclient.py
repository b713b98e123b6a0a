# sdk/sweetclient.py
import os
from typing import Any, Dict, Optional

import httpx
import requests

DEFAULT_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8085")


def response_body(r) -> Dict[str, Any]:
    """JSON body of an API response, or a stand-in error body when the
    response isn't JSON (proxy error pages, HTML 500s)."""
    try:
        body = r.json()
    except ValueError:
        return {"success": False, "message": f"HTTP {r.status_code}"}
    if not isinstance(body, dict):
        return {"success": False, "message": f"HTTP {r.status_code}: unexpected body"}
    return body


class SweetShopClient:
    """Thin wrapper over the Sweet Shop HTTP API.

    `session` can be any requests-compatible session (a FastAPI TestClient
    works too). After `login`/`register` the bearer token is kept on the
    session and sent with every later call.
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, token: Optional[str] = None,
                 timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.token = None
        if token:
            self.set_token(token)

    def set_token(self, token: str):
        self.token = token
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    # Auth
    def register(self, name: str, email: str, password: str):
        r = self.session.post(self._url("/api/auth/register"), json={
            "name": name, "email": email, "password": password
        }, timeout=self.timeout)
        r.raise_for_status()
        body = r.json()
        self.set_token(body["token"])
        return body

    def login(self, email: str, password: str):
        r = self.session.post(self._url("/api/auth/login"), json={
            "email": email, "password": password
        }, timeout=self.timeout)
        r.raise_for_status()
        body = r.json()
        self.set_token(body["token"])
        return body

    def me(self):
        r = self.session.get(self._url("/api/auth/me"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()["data"]

    # Sweets
    def list_sweets(self, category: Optional[str] = None, in_stock: Optional[bool] = None):
        params: Dict[str, Any] = {}
        if category:
            params["category"] = category
        if in_stock is not None:
            params["inStock"] = "true" if in_stock else "false"
        r = self.session.get(self._url("/api/sweets"), params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()["data"]

    def search_sweets(self, name: str):
        r = self.session.get(self._url("/api/sweets/search"), params={"name": name}, timeout=self.timeout)
        r.raise_for_status()
        return r.json()["data"]

    def get_sweet(self, sweet_id: str):
        r = self.session.get(self._url(f"/api/sweets/{sweet_id}"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()["data"]

    def create_sweet(self, name: str, category: str, price: float, quantity: int,
                     description: Optional[str] = None):
        payload: Dict[str, Any] = {"name": name, "category": category, "price": price, "quantity": quantity}
        if description:
            payload["description"] = description
        r = self.session.post(self._url("/api/sweets"), json=payload, timeout=self.timeout)
        r.raise_for_status()
        return r.json()["data"]

    def update_sweet(self, sweet_id: str, **changes):
        r = self.session.put(self._url(f"/api/sweets/{sweet_id}"), json=changes, timeout=self.timeout)
        r.raise_for_status()
        return r.json()["data"]

    def delete_sweet(self, sweet_id: str):
        r = self.session.delete(self._url(f"/api/sweets/{sweet_id}"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def purchase(self, sweet_id: str, quantity: Optional[int] = None):
        payload = {} if quantity is None else {"quantity": quantity}
        r = self.session.post(self._url(f"/api/sweets/{sweet_id}/purchase"), json=payload, timeout=self.timeout)
        # no raise_for_status: callers look at 400/404 bodies (e.g. "available")
        return r

    async def purchase_async(self, sweet_id: str, quantity: Optional[int] = None):
        payload = {} if quantity is None else {"quantity": quantity}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self._url(f"/api/sweets/{sweet_id}/purchase"), json=payload)

    def health(self):
        r = self.session.get(self._url("/health"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()


if __name__ == "__main__":
    import argparse
    from rich import print

    parser = argparse.ArgumentParser(description="Sweet Shop CLI")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--token", help="Bearer token for admin commands")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ls = subparsers.add_parser("list-sweets", help="List all sweets")
    ls.add_argument("--category", help="Filter by category")
    ls.add_argument("--in-stock", action="store_true", help="Only sweets in stock")

    sp = subparsers.add_parser("search", help="Search sweets by name")
    sp.add_argument("--name", required=True)

    gs = subparsers.add_parser("get-sweet", help="Get a sweet by its ID")
    gs.add_argument("--sweet-id", required=True)

    cs = subparsers.add_parser("create-sweet", help="Add a sweet (admin)")
    cs.add_argument("--name", required=True)
    cs.add_argument("--category", required=True)
    cs.add_argument("--price", type=float, required=True)
    cs.add_argument("--quantity", type=int, required=True)
    cs.add_argument("--description")

    ds = subparsers.add_parser("delete-sweet", help="Delete a sweet (admin)")
    ds.add_argument("--sweet-id", required=True)

    pu = subparsers.add_parser("purchase", help="Buy a sweet")
    pu.add_argument("--sweet-id", required=True)
    pu.add_argument("--qty", type=int, help="Units to buy (default 1)")

    lg = subparsers.add_parser("login", help="Log in and print the token")
    lg.add_argument("--email", required=True)
    lg.add_argument("--password", required=True)

    args = parser.parse_args()
    c = SweetShopClient(base_url=args.base_url, token=args.token)

    if args.command == "list-sweets":
        print(c.list_sweets(args.category, True if args.in_stock else None))
    elif args.command == "search":
        print(c.search_sweets(args.name))
    elif args.command == "get-sweet":
        print(c.get_sweet(args.sweet_id))
    elif args.command == "create-sweet":
        print(c.create_sweet(args.name, args.category, args.price, args.quantity, args.description))
    elif args.command == "delete-sweet":
        print(c.delete_sweet(args.sweet_id))
    elif args.command == "purchase":
        r = c.purchase(args.sweet_id, args.qty)
        print(r.status_code, response_body(r))
    elif args.command == "login":
        print(c.login(args.email, args.password)["token"])
