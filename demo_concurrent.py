import argparse
import asyncio

from sdk.sweetclient import SweetShopClient, DEFAULT_BASE_URL, response_body


async def simulate_purchase(client, buyer, sweet_id, qty):
    r = await client.purchase_async(sweet_id, qty)
    body = response_body(r)
    if r.status_code == 200 and "data" in body:
        print(f"✅ {buyer} bought {qty} (left: {body['data']['quantity']})")
    elif r.status_code == 400:
        print(f"❌ {buyer} wanted {qty}: {body.get('message')}")
    elif r.status_code == 404:
        print(f"❌ {buyer}: sweet not found")
    else:
        print(f"⚠️  {buyer} unexpected response {r.status_code}: {body}")
    return r.status_code == 200


async def main():
    parser = argparse.ArgumentParser(description="Fire concurrent purchases at one sweet")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--admin-email", required=True)
    parser.add_argument("--admin-password", required=True)
    parser.add_argument("--stock", type=int, default=10)
    parser.add_argument("--buyers", type=int, default=8)
    parser.add_argument("--qty", type=int, default=2)
    args = parser.parse_args()

    c = SweetShopClient(base_url=args.base_url)
    c.login(args.admin_email, args.admin_password)

    sweet = c.create_sweet("Race Condition Fudge", "Chocolate", 2.5, args.stock)
    print(f"\n🍫 Created sweet: {sweet['id']} with {sweet['quantity']} in stock")

    print(f"\n⚡ {args.buyers} buyers each asking for {args.qty}...")
    results = await asyncio.gather(*[
        simulate_purchase(c, f"buyer-{i}", sweet["id"], args.qty)
        for i in range(args.buyers)
    ])

    final = c.get_sweet(sweet["id"])
    sold = sum(results) * args.qty
    print(f"\n📦 Final: quantity={final['quantity']} inStock={final['inStock']}")
    print(f"🧮 Sold {sold} of {args.stock}; {args.stock - sold} expected left")

    c.delete_sweet(sweet["id"])


if __name__ == "__main__":
    asyncio.run(main())
