"""Unit tests for the statement builders."""

from __future__ import annotations

import pytest

from row_model.builder import QueryBuilder, ref
from row_model.core.enums import DatabaseBackend
from row_model.core.exceptions import QueryBuildError, ValidationError
from row_model.core.result import ExecutionResult


class TestSelect:
    def test_defaults_to_star(self, builder: QueryBuilder) -> None:
        compiled = builder.select().from_("users").compile()
        assert compiled.sql == "SELECT * FROM users"
        assert compiled.params == {}

    def test_full_statement(self, builder: QueryBuilder) -> None:
        compiled = (
            builder.select()
            .col("users.id", "users.name", "profiles.id AS profile_id")
            .from_("users")
            .left_join("profiles", lambda col, con: col("profiles.user_id").equal(ref("users.id")))
            .where(lambda col, con: col("users.age").greater(18))
            .order_by("users.name", "desc")
            .limit(5)
            .offset(10)
            .compile()
        )
        assert compiled.sql == (
            "SELECT users.id, users.name, profiles.id AS profile_id FROM users "
            "LEFT OUTER JOIN profiles ON profiles.user_id = users.id "
            "WHERE users.age > :p0 ORDER BY users.name DESC LIMIT 5 OFFSET 10"
        )
        assert compiled.params == {"p0": 18}

    def test_connectors_and_groups(self, builder: QueryBuilder) -> None:
        compiled = (
            builder.select()
            .from_("users")
            .where(
                lambda col, con: col("role")
                .in_("admin", "staff")
                .or_()
                .not_()
                .group(lambda c, g: c("age").between(18, 30).and_().col("email").is_null())
            )
            .compile()
        )
        assert compiled.sql == (
            "SELECT * FROM users WHERE role IN (:p0, :p1) "
            "OR NOT (age BETWEEN :p2 AND :p3 AND email IS NULL)"
        )
        assert compiled.params == {"p0": "admin", "p1": "staff", "p2": 18, "p3": 30}

    def test_adjacent_predicates_join_with_and(self, builder: QueryBuilder) -> None:
        def predicate(col, con):
            col("a").equal(1)
            col("b").not_equal(2)

        compiled = builder.select().from_("t").where(predicate).compile()
        assert compiled.sql == "SELECT * FROM t WHERE a = :p0 AND b != :p1"

    def test_repeated_where_is_and_ed(self, builder: QueryBuilder) -> None:
        compiled = (
            builder.select()
            .from_("t")
            .where(lambda col, con: col("a").equal(1).or_().col("b").equal(2))
            .where(lambda col, con: col("c").like("x%"))
            .compile()
        )
        assert compiled.sql == "SELECT * FROM t WHERE (a = :p0 OR b = :p1) AND c LIKE :p2"

    def test_equal_none_is_null(self, builder: QueryBuilder) -> None:
        compiled = builder.select().from_("t").where(lambda col, con: col("a").equal(None)).compile()
        assert compiled.sql == "SELECT * FROM t WHERE a IS NULL"

    def test_group_by_having_distinct(self, builder: QueryBuilder) -> None:
        compiled = (
            builder.select()
            .distinct()
            .col("role")
            .from_("users")
            .group_by("role")
            .having(lambda col, con: col("role").not_like("guest%"))
            .compile()
        )
        assert compiled.sql == (
            "SELECT DISTINCT role FROM users GROUP BY role HAVING role NOT LIKE :p0"
        )

    def test_paginate(self, builder: QueryBuilder) -> None:
        compiled = builder.select().from_("t").paginate(3, 20).compile()
        assert compiled.sql.endswith("LIMIT 20 OFFSET 40")

    def test_offset_without_limit(self, builder: QueryBuilder) -> None:
        with pytest.raises(QueryBuildError, match="OFFSET needs a LIMIT"):
            builder.select().from_("t").offset(5).compile()

    def test_missing_table(self, builder: QueryBuilder) -> None:
        with pytest.raises(QueryBuildError, match="needs a table"):
            builder.select().compile()

    @pytest.mark.parametrize("name", ["users; DROP TABLE x", "1abc", "", "a.b.c", None])
    def test_rejects_bad_identifiers(self, builder: QueryBuilder, name) -> None:
        with pytest.raises(QueryBuildError):
            builder.select().from_(name)

    def test_build_error_is_validation_error(self, builder: QueryBuilder) -> None:
        with pytest.raises(ValidationError):
            builder.select().where(lambda col, con: col("a").in_())

    def test_dangling_connector(self, builder: QueryBuilder) -> None:
        with pytest.raises(QueryBuildError, match="dangling"):
            builder.select().where(lambda col, con: col("a").equal(1).and_())

    def test_empty_predicate(self, builder: QueryBuilder) -> None:
        with pytest.raises(QueryBuildError, match="no predicate"):
            builder.select().where(lambda col, con: None)

    async def test_exec_returns_rows(self, builder: QueryBuilder, engine) -> None:
        engine.run.return_value = ExecutionResult(rows=[{"id": 1}])
        assert await builder.select().from_("t").exec() == [{"id": 1}]


class TestInsert:
    def test_single_row(self, builder: QueryBuilder) -> None:
        compiled = builder.insert().into("users").row({"name": "Jane", "age": 30}).compile()
        assert compiled.sql == "INSERT INTO users (name, age) VALUES (:p0, :p1)"
        assert compiled.params == {"p0": "Jane", "p1": 30}

    def test_multi_row_with_returning(self, builder: QueryBuilder) -> None:
        compiled = (
            builder.insert()
            .into("users")
            .rows([{"name": "A", "age": 1}, {"age": 2, "name": "B"}])
            .returning("id")
            .compile()
        )
        assert compiled.sql == (
            "INSERT INTO users (name, age) VALUES (:p0, :p1), (:p2, :p3) RETURNING id"
        )
        assert compiled.params == {"p0": "A", "p1": 1, "p2": "B", "p3": 2}

    def test_compile_twice_is_stable(self, builder: QueryBuilder) -> None:
        insert = builder.insert().into("t").row({"a": 1})
        assert insert.compile() == insert.compile()

    def test_rows_must_share_columns(self, builder: QueryBuilder) -> None:
        with pytest.raises(QueryBuildError, match="every row"):
            builder.insert().into("t").rows([{"a": 1}, {"b": 2}])

    def test_needs_rows(self, builder: QueryBuilder) -> None:
        with pytest.raises(QueryBuildError, match="at least one row"):
            builder.insert().into("t").compile()

    async def test_exec_single_returns_generated_key(self, builder: QueryBuilder, engine) -> None:
        engine.run.return_value = ExecutionResult(lastrowid=7)
        assert await builder.insert().into("t").row({"a": 1}).exec() == 7

    async def test_exec_many_without_returning(self, builder: QueryBuilder, engine) -> None:
        engine.run.return_value = ExecutionResult(lastrowid=8)
        assert await builder.insert().into("t").rows([{"a": 1}, {"a": 2}]).exec() is None

    async def test_exec_single_with_returning(self, builder: QueryBuilder, engine) -> None:
        engine.run.return_value = ExecutionResult(rows=[{"id": 3}])
        result = await builder.insert().into("t").row({"a": 1}).returning("id").exec()
        assert result == {"id": 3}


class TestUpdateDelete:
    def test_update(self, builder: QueryBuilder) -> None:
        compiled = (
            builder.update()
            .table("users")
            .set({"name": "Jane", "age": 31})
            .where(lambda col, con: col("id").equal(4))
            .compile()
        )
        assert compiled.sql == "UPDATE users SET name=:p1, age=:p2 WHERE id = :p0"
        assert compiled.params == {"p0": 4, "p1": "Jane", "p2": 31}

    def test_update_needs_assignments(self, builder: QueryBuilder) -> None:
        with pytest.raises(QueryBuildError, match="at least one assignment"):
            builder.update().table("users").compile()

    def test_delete(self, builder: QueryBuilder) -> None:
        compiled = (
            builder.delete()
            .from_("users")
            .where(lambda col, con: col("id").not_in(1, 2))
            .compile()
        )
        assert compiled.sql == "DELETE FROM users WHERE (id NOT IN (:p0, :p1))"

    async def test_exec_resolves_to_none(self, builder: QueryBuilder, engine, executed) -> None:
        assert await builder.delete().from_("users").exec() is None
        assert executed(engine) == [("DELETE FROM users", {})]


class TestDialects:
    def test_reserved_word_columns_are_quoted(self, builder: QueryBuilder) -> None:
        compiled = builder.insert().into("items").row({"order": 3, "key": "k"}).compile()
        assert compiled.sql == 'INSERT INTO items ("order", "key") VALUES (:p0, :p1)'
        assert compiled.params == {"p0": 3, "p1": "k"}

    def test_reserved_word_update(self, builder: QueryBuilder) -> None:
        compiled = (
            builder.update()
            .table("items")
            .set({"group": "a"})
            .where(lambda col, con: col("order").equal(1))
            .compile()
        )
        assert compiled.sql == 'UPDATE items SET "group"=:p1 WHERE "order" = :p0'

    def test_postgresql_reserved_table(self, pg_engine) -> None:
        compiled = (
            QueryBuilder(pg_engine)
            .select()
            .col("user.*")
            .from_("user")
            .where(lambda col, con: col("user.id").equal(1))
            .compile()
        )
        assert compiled.sql == 'SELECT "user".* FROM "user" WHERE "user".id = :p0'

    def test_mysql_quotes_with_backticks(self, mysql_engine) -> None:
        compiled = QueryBuilder(mysql_engine).insert().into("items").row({"order": 3}).compile()
        assert compiled.sql == "INSERT INTO items (`order`) VALUES (:p0)"

    def test_mysql_rejects_returning(self, mysql_engine) -> None:
        insert = QueryBuilder(mysql_engine).insert().into("items").row({"a": 1}).returning("id")
        with pytest.raises(QueryBuildError):
            insert.compile()

    def test_right_join(self, builder: QueryBuilder) -> None:
        compiled = (
            builder.select()
            .from_("a")
            .right_join("b", lambda col, con: col("b.a_id").equal(ref("a.id")))
            .compile()
        )
        assert compiled.sql == "SELECT * FROM b LEFT OUTER JOIN a ON b.a_id = a.id"

    def test_backend_picks_dialect(self, builder: QueryBuilder, engine) -> None:
        statement = builder.select().from_("t").where(lambda col, con: col("key").equal(1))
        assert str(statement) == 'SELECT * FROM t WHERE "key" = :p0'
        engine.backend = DatabaseBackend.MYSQL
        assert str(statement) == "SELECT * FROM t WHERE `key` = :p0"
