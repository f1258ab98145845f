"""Placeholder rewriting for the driver's parameter style.

Statements are compiled with ``:name`` placeholders, which aiosqlite
accepts as is. psycopg and aiomysql use ``pyformat``: placeholders become
``%(name)s`` and every literal ``%`` must be doubled, including the ones
inside string literals. PostgreSQL ``::type`` casts are never placeholders.
"""

from __future__ import annotations

import re
from functools import lru_cache

from row_model.core.exceptions import AdapterError

PARAMSTYLES = frozenset({"named", "pyformat"})

# String literal ('' escapes a quote), cast, placeholder, or bare percent sign
_TOKEN = re.compile(r"'(?:[^']|'')*'|::|(?<![\w:]):([A-Za-z_]\w*)|%")


def normalize_params(sql: str, paramstyle: str) -> str:
    """Rewrite ``:name`` placeholders of *sql* for *paramstyle*.

    Raises:
        AdapterError: If the paramstyle is not supported.
    """
    if paramstyle not in PARAMSTYLES:
        raise AdapterError(f"Unsupported paramstyle: {paramstyle}")
    if paramstyle == "named":
        return sql
    return _to_pyformat(sql)


def _pyformat_token(match: re.Match[str]) -> str:
    token = match.group(0)
    if match.group(1) is not None:
        return f"%({match.group(1)})s"
    if token.startswith("'") or token == "%":
        return token.replace("%", "%%")
    return token


@lru_cache(maxsize=512)
def _to_pyformat(sql: str) -> str:
    return _TOKEN.sub(_pyformat_token, sql)
