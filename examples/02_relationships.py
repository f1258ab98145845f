"""
Example 02: Relationships and Links

This example demonstrates one-to-one, one-to-many and many-to-many
relationships, and managing the association table with link/unlink.
"""

import asyncio

from row_model import AsyncEngine, ConnectionConfig, Model, QueryBuilder


class User(Model, table="users"):
    async def profile(self):
        return await self.one_to_one(Profile)

    async def posts(self):
        return await self.one_to_many(Post)

    async def teams(self):
        # Association table defaults to "team_user" (names sorted)
        return await self.many_to_many(Team, None, "role")


class Profile(Model, table="profiles", timestamps=False):
    async def user(self):
        return await self.references(User)


class Post(Model, table="posts", timestamps=False):
    pass


class Team(Model, table="teams", timestamps=False):
    pass


SCHEMA = [
    "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, email TEXT, "
    "created_at TEXT, updated_at TEXT)",
    "CREATE TABLE profiles (id INTEGER PRIMARY KEY AUTOINCREMENT, user_id INTEGER, bio TEXT)",
    "CREATE TABLE posts (id INTEGER PRIMARY KEY AUTOINCREMENT, user_id INTEGER, title TEXT)",
    "CREATE TABLE teams (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)",
    "CREATE TABLE team_user (user_id INTEGER, team_id INTEGER, role TEXT)",
]


async def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)
    engine = AsyncEngine.from_config(config)
    for ddl in SCHEMA:
        await engine.run(ddl)

    builder = QueryBuilder(engine)
    for model in (User, Profile, Post, Team):
        model.configure(builder=builder)

    alice = await User.insert({"email": "alice@example.com"})
    await Profile.insert({"user_id": alice.id, "bio": "Engineer"})
    await Post.insert_many([
        {"user_id": alice.id, "title": "Hello"},
        {"user_id": alice.id, "title": "Again"},
    ])

    print("=== Relationships ===\n")

    print("1. One-to-one:")
    profile = await alice.profile()
    print(f"   {profile}\n")

    print("2. References (inverse of one-to-one):")
    print(f"   {await profile.user()}\n")

    print("3. One-to-many:")
    for post in await alice.posts():
        print(f"   - {post.title}")
    print()

    print("4. Link and many-to-many:")
    ops = await Team.insert({"name": "ops"})
    dev = await Team.insert({"name": "dev"})
    await alice.link(ops, None, {"role": "owner"})
    await alice.link_many([dev], None, [{"role": "member"}])
    for team in await alice.teams():
        print(f"   - {team.name} ({team.role})")
    print()

    print("5. Unlink:")
    await alice.unlink_many([ops, dev])
    print(f"   {await alice.teams()}\n")

    await engine.close()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
