#!/usr/bin/env python3
"""
Seed script to fill a running RuzMovie API with demo channels and videos.

Signs up a few demo users (or logs them in when they already exist), has
them subscribe to each other and publishes URL videos in the default
categories. Everything goes through the public HTTP API.
"""

import asyncio
import httpx
import os
from datetime import datetime

# Configuration
API_BASE_URL = os.getenv("API_URL", "http://localhost:8000/api/v1")
DEMO_PASSWORD = os.getenv("SEED_PASSWORD", "demo-password")

SEED_USERS = [
    {"firstname": "Ana", "lastname": "Lopez", "username": "ana_films", "email": "ana@example.com"},
    {"firstname": "Ben", "lastname": "Okafor", "username": "ben_beats", "email": "ben@example.com"},
    {"firstname": "Chloe", "lastname": "Martin", "username": "chloe_toons", "email": "chloe@example.com"},
]

# (owner username, video fields)
SEED_VIDEOS = [
    ("ana_films", {
        "title": "Big Buck Bunny",
        "description": "Open movie by the Blender Foundation.",
        "category": "movies",
        "url": "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/BigBuckBunny.mp4",
        "thumbnail": "https://peach.blender.org/wp-content/uploads/title_anouncement.jpg",
    }),
    ("ana_films", {
        "title": "Sintel",
        "description": "A lonely young woman searches for her dragon.",
        "category": "dramas",
        "url": "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/Sintel.mp4",
        "thumbnail": "https://durian.blender.org/wp-content/uploads/2010/06/05.8b_comp_000272.jpg",
    }),
    ("ben_beats", {
        "title": "Tears of Steel",
        "description": "Sci-fi short with a soundtrack worth a listen.",
        "category": "music",
        "url": "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/TearsOfSteel.mp4",
        "thumbnail": "https://mango.blender.org/wp-content/uploads/2013/05/01_thom_celia_bridge.jpg",
    }),
    ("chloe_toons", {
        "title": "Elephants Dream",
        "description": "The first Blender open movie.",
        "category": "cartoons",
        "url": "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/ElephantsDream.mp4",
        "thumbnail": "https://orange.blender.org/wp-content/themes/orange/images/media/gallery/s1_proog.jpg",
    }),
]


async def wait_for_api(client: httpx.AsyncClient, max_retries: int = 30) -> bool:
    """Wait for the API to be ready."""
    for i in range(max_retries):
        try:
            response = await client.get(f"{API_BASE_URL.replace('/api/v1', '')}/health")
            if response.status_code == 200:
                print("✅ API is ready!")
                return True
        except httpx.HTTPError:
            pass
        print(f"⏳ Waiting for API... ({i + 1}/{max_retries})")
        await asyncio.sleep(2)
    return False


async def get_token(client: httpx.AsyncClient, user: dict) -> str:
    """Sign up, or log in when the account already exists."""
    response = await client.post(
        f"{API_BASE_URL}/auth/signup",
        json={**user, "password": DEMO_PASSWORD},
    )
    if response.status_code == 200:
        print(f"  ✅ Signed up {user['username']}")
        return response.json()["data"]

    response = await client.post(
        f"{API_BASE_URL}/auth/login",
        json={"email_or_username": user["username"], "password": DEMO_PASSWORD},
    )
    response.raise_for_status()
    print(f"  ↩️  Logged in {user['username']}")
    return response.json()["data"]


async def seed_users(client: httpx.AsyncClient) -> dict:
    print("\n👤 Seeding users...")
    tokens = {}
    for user in SEED_USERS:
        tokens[user["username"]] = await get_token(client, user)
    return tokens


async def seed_videos(client: httpx.AsyncClient, tokens: dict) -> int:
    print("\n🎬 Seeding videos...")
    created = 0
    for username, fields in SEED_VIDEOS:
        response = await client.post(
            f"{API_BASE_URL}/videos",
            data=fields,
            headers={"Authorization": f"Bearer {tokens[username]}"},
        )
        if response.status_code == 200:
            created += 1
            print(f"  ✅ {fields['title']} ({fields['category']})")
        else:
            print(f"  ❌ {fields['title']}: {response.json().get('message', response.text)}")
    return created


async def seed_subscriptions(client: httpx.AsyncClient, tokens: dict) -> None:
    """Everyone subscribes to everyone else."""
    print("\n🔔 Seeding subscriptions...")
    ids = {}
    subscribed = {}
    for username, token in tokens.items():
        response = await client.get(
            f"{API_BASE_URL}/auth/me",
            headers={"Authorization": f"Bearer {token}"},
        )
        response.raise_for_status()
        me = response.json()["data"]
        ids[username] = me["id"]
        subscribed[username] = {c["id"] for c in me["channels"]}

    for username, token in tokens.items():
        for other in tokens:
            if other == username or ids[other] in subscribed[username]:
                continue
            response = await client.get(
                f"{API_BASE_URL}/users/{ids[other]}/togglesubscribe",
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
            print(f"  ✅ {username} -> {other}")


async def main():
    print("=" * 60)
    print("🎯 RuzMovie Seed Script")
    print(f"   Started at: {datetime.now().isoformat()}")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        # Wait for API
        if not await wait_for_api(client):
            print("❌ API is not available. Please start the server first.")
            return

        tokens = await seed_users(client)
        created = await seed_videos(client, tokens)
        await seed_subscriptions(client, tokens)

        print("\n" + "=" * 60)
        print("🚀 Seed complete!")
        print(f"   Users: {len(tokens)}  Videos created: {created}")
        print(f"   Demo password: {DEMO_PASSWORD}")
        print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
