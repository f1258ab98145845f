"""
Example 01: CRUD Lifecycle

This example demonstrates defining an entity type and running insert,
find, update and delete against an in-memory SQLite database.
"""

import asyncio

from row_model import AsyncEngine, ConnectionConfig, Model, QueryBuilder


class User(Model, table="users", ignore=["id"]):
    pass


async def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)
    engine = AsyncEngine.from_config(config)
    await engine.run("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            name TEXT,
            created_at TEXT,
            updated_at TEXT
        )
    """)

    User.configure(builder=QueryBuilder(engine))

    print("=== CRUD Lifecycle ===\n")

    print("1. Insert one row:")
    alice = await User.insert({"email": "alice@example.com", "name": "Alice"})
    print(f"   {alice}\n")

    print("2. Insert many rows (one statement, no keys on SQLite):")
    users = await User.insert_many([
        {"email": "bob@example.com", "name": "Bob"},
        {"email": "charlie@example.com", "name": "Charlie"},
    ])
    print(f"   {users}\n")

    print("3. Find by primary key:")
    bob = await User.find(2)
    print(f"   {bob}\n")

    print("4. Find many:")
    for user in await User.find_many([1, 3]):
        print(f"   - {user.name}")
    print()

    print("5. Update an instance:")
    bob.name = "Robert"
    await bob.update()
    print(f"   {await User.find(2)}\n")

    print("6. Select with conditions:")
    rows = await (
        User.select()
        .where(lambda col, con: col("name").like("%r%").or_().col("id").equal(1))
        .order_by("name", "DESC")
        .all()
    )
    print(f"   {[u.name for u in rows]}\n")

    print("7. Condition-scoped update and delete:")
    await User.where(lambda col, con: col("id").greater(1)).update({"name": "Someone"})
    await alice.delete()
    print(f"   {[u.to_dict() for u in await User.select().all()]}\n")

    await engine.close()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
