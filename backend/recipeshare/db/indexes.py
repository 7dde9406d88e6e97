# recipeshare/db/indexes.py
# Collection indexes. main.py awaits ensure_indexes(db) once the mongo stores are up.

async def ensure_recipe_indexes(db):
    col = db["recipes"]
    # free-text search ($text) over title/description/ingredient names
    await col.create_index(
        [("title", "text"), ("description", "text"), ("ingredients.name", "text")],
        name="recipe_text",
    )
    await col.create_index([("cuisine", 1), ("diet", 1), ("difficulty", 1)])
    # list order: newest first, _id as tie-break
    await col.create_index([("createdAt", -1), ("_id", -1)])
    await col.create_index([("author", 1), ("createdAt", -1)])
    await col.create_index("ingredients.name")

async def ensure_user_indexes(db):
    # MongoUserStore maps violations to UsernameTaken
    await db["users"].create_index("username", unique=True)

async def ensure_indexes(db):
    await ensure_recipe_indexes(db)
    await ensure_user_indexes(db)
