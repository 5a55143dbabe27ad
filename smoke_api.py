"""Script manuel: parcourt l'API d'un serveur lancé en local"""

import asyncio
import uuid

import httpx

BASE_URL = "http://localhost:8000/api"


async def run_smoke():
    session_headers = {"X-Session-Id": uuid.uuid4().hex}

    async with httpx.AsyncClient() as client:
        print("\n" + "=" * 60)
        print("🧪 TEST API AGRIMART")
        print("=" * 60 + "\n")

        # 1. Health Check
        print("1️⃣  Health Check")
        try:
            response = await client.get("http://localhost:8000/health")
            print(f"✅ Health: {response.json()}\n")
        except httpx.HTTPError as e:
            print(f"❌ Erreur: {e}\n")
            return

        # 2. Inscription (ou connexion si l'email existe déjà)
        print("2️⃣  Register / Login")
        credentials = {"email": "farmer@example.com", "password": "password123"}
        response = await client.post(f"{BASE_URL}/auth/register", json={
            **credentials,
            "username": "farmer",
            "address": "12, Main Road, Nashik, Maharashtra, 422001",
            "phoneNumber": "9876543210"
        })
        if response.status_code != 200:
            response = await client.post(f"{BASE_URL}/auth/login", json=credentials)
        if response.status_code != 200:
            print(f"❌ {response.text}\n")
            return
        token = response.json()["token"]
        print(f"✅ Token: {token[:30]}...\n")
        headers = {**session_headers, "Authorization": f"Bearer {token}"}

        # 3. Catalogue
        print("3️⃣  Products")
        response = await client.get(f"{BASE_URL}/products", params={"maxPrice": 500000})
        products = response.json().get("data", [])
        print(f"✅ {len(products)} produits trouvés\n")

        # 4. Panier
        if products:
            print("4️⃣  Add to cart")
            product = products[0]
            for _ in range(2):
                response = await client.post(f"{BASE_URL}/cart/add", headers=headers, json={
                    "productId": product["id"],
                    "color": (product["colors"] or [""])[0]
                })
            cart = response.json().get("data", {})
            print(f"✅ Lignes: {cart.get('itemCount')} | Total: {cart.get('total')}\n")

            # 5. Checkout
            print("5️⃣  Checkout")
            response = await client.post(f"{BASE_URL}/checkout", headers=headers, json={
                "shippingAddress": {
                    "doorNumber": "12",
                    "street": "Main Road",
                    "cityOrVillage": "Nashik",
                    "state": "Maharashtra",
                    "pinCode": "422001"
                },
                "paymentMethod": "cashOnDelivery"
            })
            print(f"{'✅' if response.status_code == 200 else '❌'} {response.json()}\n")

        # 6. Commandes
        print("6️⃣  Orders")
        response = await client.get(f"{BASE_URL}/orders", headers=headers)
        print(f"✅ {response.json().get('count', 0)} commandes\n")

        print("=" * 60)
        print("✅ Tests complétés!")
        print("=" * 60 + "\n")


if __name__ == "__main__":
    asyncio.run(run_smoke())
