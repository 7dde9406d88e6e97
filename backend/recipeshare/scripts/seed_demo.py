# recipeshare/scripts/seed_demo.py
# Demo users/recipes/engagement.
# - mongo: python -m recipeshare.scripts.seed_demo
# - memory: main.py runs seed() on startup so X-User-Id has someone to be
import asyncio
import logging
import random
from typing import List, Optional

from recipeshare.core.config import settings
from recipeshare.core.deps import close_stores, get_catalog, get_engagement, init_stores, mongo_db
from recipeshare.db.indexes import ensure_indexes
from recipeshare.services.catalog import CatalogService
from recipeshare.services.engagement import EngagementManager

log = logging.getLogger("seed_demo")

USERS = [
    ("chef_mario", "Pasta every day."),
    ("green_kitchen", "Plants first."),
    ("keto_kim", "Low carb, high flavour."),
]

RECIPES = [
    {
        "title": "Spaghetti Aglio e Olio",
        "description": "Garlic, olive oil and chili. Ten minutes of work.",
        "image": "https://images.example.com/aglio.jpg",
        "ingredients": [
            {"name": "spaghetti", "amount": "200 g"},
            {"name": "garlic", "amount": "4 cloves"},
            {"name": "olive oil", "amount": "4 tbsp"},
        ],
        "instructions": [
            {"step": 1, "description": "Boil the pasta in salted water."},
            {"step": 2, "description": "Fry sliced garlic gently in the oil."},
            {"step": 3, "description": "Toss pasta with the garlic oil."},
        ],
        "prepTime": 5, "cookTime": 12, "servings": 2, "calories": 520,
        "difficulty": "Easy", "cuisine": "Italian", "diet": "Vegan",
        "tags": ["pasta", "quick"],
    },
    {
        "title": "Chickpea Curry",
        "description": "Creamy coconut chickpea curry.",
        "image": "https://images.example.com/curry.jpg",
        "ingredients": [
            {"name": "chickpeas", "amount": "1 can"},
            {"name": "coconut milk", "amount": "400 ml"},
            {"name": "onion", "amount": "1"},
        ],
        "instructions": [
            {"step": 1, "description": "Soften the onion."},
            {"step": 2, "description": "Add spices, chickpeas and coconut milk, simmer."},
        ],
        "prepTime": 10, "cookTime": 25, "servings": 4, "calories": 430,
        "difficulty": "Easy", "cuisine": "Indian", "diet": "Vegetarian",
        "tags": ["curry"],
    },
    {
        "title": "Steak with Herb Butter",
        "description": "Pan-seared ribeye, herb butter finish.",
        "image": "https://images.example.com/steak.jpg",
        "ingredients": [
            {"name": "ribeye", "amount": "300 g"},
            {"name": "butter", "amount": "30 g"},
        ],
        "instructions": [
            {"step": 1, "description": "Sear the steak on high heat."},
            {"step": 2, "description": "Rest and top with herb butter."},
        ],
        "prepTime": 5, "cookTime": 10, "servings": 1,
        "difficulty": "Medium", "cuisine": "American", "diet": "Keto",
    },
]

async def seed(
    catalog: CatalogService,
    engagement: EngagementManager,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Demo users (reused when the username exists) + RECIPES with ratings and a comment.
    Returns the demo user ids."""
    rng = rng or random.Random()
    uids: List[str] = []
    for name, bio in USERS:
        existing = await catalog.users.get_by_username(name)
        if existing:
            uids.append(existing["_id"])
            continue
        uids.append((await catalog.register_user(name, bio=bio))["id"])

    for i, payload in enumerate(RECIPES):
        created = await catalog.create_recipe(uids[i % len(uids)], payload)
        for uid in uids:
            await engagement.rate(created["id"], uid, rng.randint(3, 5))
        await engagement.comment(created["id"], uids[0], "Made this tonight, great!")
        log.info("seeded %s (%s)", created["title"], created["id"])
    return uids

async def main() -> None:
    if settings.STORE_BACKEND != "mongo":
        raise SystemExit("seed_demo writes to MongoDB; memory stores are seeded on app startup")
    await init_stores()
    await ensure_indexes(mongo_db())
    uids = await seed(get_catalog(), get_engagement())
    await close_stores()
    print(f"[seed] done: {len(uids)} users, {len(RECIPES)} recipes → {settings.MONGO_DB}")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
