"""Unit tests for relationship loading."""

from __future__ import annotations

import pytest

from row_model.builder.builder import QueryBuilder
from row_model.core.result import ExecutionResult
from row_model.core.exceptions import RelationshipIntegrityError, ValidationError
from row_model.model.base import Model


class User(Model, table="users"):
    async def profile(self):
        return await self.one_to_one(Profile)

    async def posts(self):
        return await self.one_to_many(Post)

    async def groups(self):
        return await self.many_to_many(Group, None, "role")


class Profile(Model, table="profiles"):
    async def user(self):
        return await self.references(User)


class Post(Model, table="posts", modifiers={"title": [str.upper]}):
    pass


class Group(Model, table="groups", columns=["id", "name"]):
    pass


@pytest.fixture(autouse=True)
def configured(builder: QueryBuilder) -> None:
    for model in (User, Profile, Post, Group):
        model.configure(builder=builder)


class TestOneToOne:
    async def test_filters_by_foreign_key(self, engine, executed) -> None:
        engine.run.return_value = ExecutionResult(rows=[{"id": 2, "user_id": 1}])
        profile = await User({"id": 1}).profile()
        assert isinstance(profile, Profile)
        assert profile.user_id == 1
        assert executed(engine) == [
            ("SELECT profiles.* FROM profiles WHERE user_id = :p0", {"p0": 1})
        ]

    async def test_absent(self, engine) -> None:
        assert await User({"id": 1}).profile() is None

    async def test_more_than_one(self, engine) -> None:
        engine.run.return_value = ExecutionResult(rows=[{"id": 2}, {"id": 3}])
        with pytest.raises(
            RelationshipIntegrityError, match="User has more than one Profile"
        ) as exc_info:
            await User({"id": 1}).profile()
        assert (exc_info.value.owner, exc_info.value.related) == ("User", "Profile")

    async def test_invalid_model(self, engine) -> None:
        with pytest.raises(ValidationError, match="Invalid model"):
            await User({"id": 1}).one_to_one("Profile")
        engine.run.assert_not_called()

    async def test_needs_primary_key(self, engine) -> None:
        with pytest.raises(ValidationError, match="Invalid id value"):
            await User({}).profile()
        engine.run.assert_not_called()


class TestReferences:
    async def test_filters_by_parent_primary_key(self, engine, executed) -> None:
        engine.run.return_value = ExecutionResult(rows=[{"id": 1, "email": "a"}])
        user = await Profile({"id": 2, "user_id": 1}).user()
        assert isinstance(user, User)
        assert executed(engine) == [("SELECT users.* FROM users WHERE id = :p0", {"p0": 1})]

    async def test_references_many(self, engine) -> None:
        engine.run.return_value = ExecutionResult(rows=[{"id": 1}, {"id": 1}])
        with pytest.raises(RelationshipIntegrityError, match="Profile references many User"):
            await Profile({"id": 2, "user_id": 1}).user()

    async def test_needs_foreign_key(self, engine) -> None:
        with pytest.raises(ValidationError, match="Invalid user_id value"):
            await Profile({"id": 2}).user()


class TestOneToMany:
    async def test_all_matches_hydrated(self, engine, executed) -> None:
        engine.run.return_value = ExecutionResult(
            rows=[{"id": 1, "title": "a"}, {"id": 2, "title": "b"}]
        )
        posts = await User({"id": 5}).posts()
        assert [p.title for p in posts] == ["A", "B"]
        assert executed(engine)[0] == ("SELECT posts.* FROM posts WHERE user_id = :p0", {"p0": 5})

    async def test_empty(self, engine) -> None:
        assert await User({"id": 5}).posts() == []


class TestManyToMany:
    async def test_join_and_filter(self, engine, executed) -> None:
        engine.run.return_value = ExecutionResult(rows=[{"id": 3, "name": "ops", "role": "admin"}])
        groups = await User({"id": 5}).groups()
        assert groups[0].role == "admin"
        assert executed(engine) == [
            (
                "SELECT groups.id, groups.name, group_user.role FROM groups "
                "JOIN group_user ON groups.id = group_user.group_id "
                "WHERE group_user.user_id = :p0",
                {"p0": 5},
            )
        ]

    async def test_custom_table(self, engine, executed) -> None:
        await User({"id": 5}).many_to_many(Group, "memberships")
        sql, _ = executed(engine)[0]
        assert "FROM groups JOIN memberships ON groups.id = memberships.group_id" in sql
        assert sql.endswith("WHERE memberships.user_id = :p0")

    async def test_invalid_extra_column(self, engine) -> None:
        with pytest.raises(ValidationError):
            await User({"id": 5}).many_to_many(Group, None, "role; --")
        engine.run.assert_not_called()
