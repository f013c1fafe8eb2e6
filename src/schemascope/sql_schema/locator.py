"""Statement locator.

Finds the three statement families the engine understands in raw DDL text:

- ``ALTER TABLE ... ENABLE ROW LEVEL SECURITY``
- ``CREATE POLICY "<name>" ON <table> ...``
- ``CREATE TABLE <name> ( ... );``

Matching is structural (regexes plus paren balancing), never a grammar, so
hand-edited or partially broken files still yield whatever can be recovered.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .scanning import (
    find_balanced_paren,
    split_qualified_name,
    strip_comments,
    strip_identifier_quotes,
)

logger = logging.getLogger(__name__)


RLS_ENABLE_PATTERN = re.compile(
    r'ALTER\s+TABLE\s+(?:IF\s+EXISTS\s+)?(?:ONLY\s+)?(\S+)\s+ENABLE\s+ROW\s+LEVEL\s+SECURITY',
    re.IGNORECASE
)

# Body runs lazily up to the ";" that precedes the next CREATE, or end of input.
# Comments may sit between the ";" and the CREATE.
POLICY_PATTERN = re.compile(
    r'CREATE\s+POLICY\s+(?:"([^"]+)"|(\w+))\s+ON\s+(?:ONLY\s+)?(\S+)\s+([\s\S]*?)(?=;(?:\s|--[^\n]*|/\*[\s\S]*?\*/)*CREATE\b|\s*;?\s*\Z)',
    re.IGNORECASE
)

TABLE_HEADER_PATTERN = re.compile(
    r'CREATE\s+(?:(?:GLOBAL|LOCAL)\s+)?(?:(?:TEMP|TEMPORARY|UNLOGGED)\s+)?TABLE\s+'
    r'(?:IF\s+NOT\s+EXISTS\s+)?([^\s(]+)\s*\(',
    re.IGNORECASE
)

# Fallback terminator when the body's parens do not balance.
TABLE_END_PATTERN = re.compile(r'\n\s*\);')


@dataclass(frozen=True)
class PolicyStatement:
    """Raw CREATE POLICY span."""
    name: str
    table: str
    body: str


@dataclass(frozen=True)
class TableStatement:
    """Raw CREATE TABLE span; ``body`` is the text between the outer parens."""
    schema: str
    name: str
    body: str


@dataclass(frozen=True)
class LocatedStatements:
    """Everything the locator found in one source text."""
    rls_enabled_tables: frozenset[str]
    policies: tuple[PolicyStatement, ...]
    tables: tuple[TableStatement, ...]


def find_rls_enabled_tables(sql: str) -> frozenset[str]:
    """Names of tables switched on by ``ENABLE ROW LEVEL SECURITY``.

    Schema qualifiers are dropped; policies are keyed by bare table name.
    """
    names = set()
    for match in RLS_ENABLE_PATTERN.finditer(strip_comments(sql)):
        _, table_name = split_qualified_name(match.group(1))
        if table_name:
            names.add(table_name)
    return frozenset(names)


def find_policy_statements(sql: str) -> list[PolicyStatement]:
    """All CREATE POLICY statements in source order."""
    statements = []
    for match in POLICY_PATTERN.finditer(strip_comments(sql)):
        policy_name = match.group(1) if match.group(1) is not None else match.group(2)
        _, table_name = split_qualified_name(match.group(3))
        statements.append(PolicyStatement(
            name=policy_name,
            table=table_name,
            body=match.group(4),
        ))
    return statements


def find_table_statements(sql: str) -> list[TableStatement]:
    """All CREATE TABLE statements in source order.

    The body ends at the paren that balances the opening one. When the body
    does not balance (stray quote, truncated file) the first newline followed
    by ``);`` is used instead; tables with neither are skipped.
    """
    sql = strip_comments(sql)
    statements = []
    position = 0

    while True:
        match = TABLE_HEADER_PATTERN.search(sql, position)
        if not match:
            break

        open_index = match.end() - 1
        close_index = find_balanced_paren(sql, open_index)
        if close_index == -1:
            end_match = TABLE_END_PATTERN.search(sql, open_index)
            if not end_match:
                logger.debug(f"Unterminated CREATE TABLE at offset {match.start()}")
                position = match.end()
                continue
            close_index = end_match.start()

        schema, table_name = split_qualified_name(match.group(1))
        statements.append(TableStatement(
            schema=schema or "public",
            name=strip_identifier_quotes(table_name),
            body=sql[open_index + 1:close_index],
        ))
        position = close_index + 1

    return statements


def locate_statements(sql: str) -> LocatedStatements:
    """Run all three scans over one source text."""
    located = LocatedStatements(
        rls_enabled_tables=find_rls_enabled_tables(sql),
        policies=tuple(find_policy_statements(sql)),
        tables=tuple(find_table_statements(sql)),
    )
    logger.debug(
        f"Located {len(located.tables)} tables, {len(located.policies)} policies, "
        f"{len(located.rls_enabled_tables)} RLS enable statements"
    )
    return located
