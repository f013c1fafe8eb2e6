"""Column and constraint parser for CREATE TABLE bodies.

Decomposes a table body into column declarations and table-level
PRIMARY KEY / FOREIGN KEY constraints. Each logical line is tried against an
ordered list of (pattern, handler) rules; the first rule that matches owns
the line. Nothing here raises on bad input: a line no rule understands is
skipped.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator

from .models import Column, ForeignKey
from .scanning import (
    collapse_whitespace,
    find_balanced_paren,
    split_outside_parens,
    split_qualified_name,
    strip_comments,
    strip_identifier_quotes,
)

logger = logging.getLogger(__name__)


# Tokens that start a table constraint, never a column.
RESERVED_COLUMN_NAMES = frozenset({
    "CONSTRAINT", "PRIMARY", "FOREIGN", "UNIQUE", "CHECK", "INDEX", "EXCLUDE", "LIKE",
})

PRIMARY_KEY_CONSTRAINT = re.compile(
    r'^(?:CONSTRAINT\s+(\S+)\s+)?PRIMARY\s+KEY\s*\(([^)]+)\)',
    re.IGNORECASE
)

FOREIGN_KEY_CONSTRAINT = re.compile(
    r'^(?:CONSTRAINT\s+(\S+)\s+)?FOREIGN\s+KEY\s*\(([^)]+)\)\s*REFERENCES\s+([^\s(]+)\s*\(([^)]+)\)',
    re.IGNORECASE
)

OTHER_CONSTRAINT = re.compile(r'^CONSTRAINT\s+', re.IGNORECASE)

COLUMN_DECLARATION = re.compile(r'^(?:"([^"]+)"|(\w+))\s+(.+?)(?:,\s*)?$', re.DOTALL)

# Leading type expression: words, optional (precision, scale), [] or ARRAY suffix.
TYPE_EXPRESSION = re.compile(
    r'^([\w\s.]+(?:\([^)]*\))?(?:\[\d*\])*(?:\s+ARRAY(?:\[\d*\])?)?)',
    re.IGNORECASE
)

# Clauses that can trail the type expression; cut from the first one found.
TYPE_TRAILING_CLAUSES = tuple(
    re.compile(pattern, re.IGNORECASE | re.DOTALL) for pattern in (
        r'\s+NOT\s+NULL\b.*',
        r'\s+DEFAULT\b.*',
        r'\s+CHECK\b.*',
        r'\s+UNIQUE\b.*',
        r'\s+PRIMARY\b.*',
        r'\s+REFERENCES\b.*',
        r'\s+GENERATED\b.*',
        r'\s+COLLATE\b.*',
        r'\s+CONSTRAINT\b.*',
        r'\s+NULL\b.*',
    )
)

DEFAULT_KEYWORD = re.compile(r'(?<!\bBY\s)\bDEFAULT\s+', re.IGNORECASE)
CHECK_KEYWORD = re.compile(r'\bCHECK\s*\(', re.IGNORECASE)


@dataclass(frozen=True)
class ParsedTableBody:
    """Columns and constraints recovered from one CREATE TABLE body."""
    columns: tuple[Column, ...] = ()
    primary_keys: tuple[str, ...] = ()
    foreign_keys: tuple[ForeignKey, ...] = ()


@dataclass
class _BodyAccumulator:
    table_name: str
    columns: list[Column] = field(default_factory=list)
    primary_keys: list[str] = field(default_factory=list)
    foreign_keys: list[ForeignKey] = field(default_factory=list)

    def add_primary_key(self, column_name: str) -> None:
        if column_name and column_name not in self.primary_keys:
            self.primary_keys.append(column_name)


# ============================================================================
# Line rules
# ============================================================================

def _on_primary_key(acc: _BodyAccumulator, match: re.Match, line: str) -> None:
    for column_name in match.group(2).split(','):
        acc.add_primary_key(strip_identifier_quotes(column_name))


def _on_foreign_key(acc: _BodyAccumulator, match: re.Match, line: str) -> None:
    column_name = strip_identifier_quotes(match.group(2))
    _, referenced_table = split_qualified_name(match.group(3))
    constraint_name = (
        strip_identifier_quotes(match.group(1)) if match.group(1)
        else f"{acc.table_name}_{column_name}_fkey"
    )
    acc.foreign_keys.append(ForeignKey(
        column=column_name,
        referenced_table=referenced_table,
        referenced_column=strip_identifier_quotes(match.group(4)),
        constraint_name=constraint_name,
    ))


def _on_other_constraint(acc: _BodyAccumulator, match: re.Match, line: str) -> None:
    # Table-level CHECK / UNIQUE / EXCLUDE constraints are not modeled
    return None


def _on_column(acc: _BodyAccumulator, match: re.Match, line: str) -> None:
    quoted_name, bare_name, col_def = match.groups()
    if bare_name is not None and bare_name.upper() in RESERVED_COLUMN_NAMES:
        logger.debug(f"Skipping constraint-like line in {acc.table_name}: {line[:60]}")
        return

    column = parse_column_definition(quoted_name if quoted_name is not None else bare_name, col_def)
    if column.is_primary_key:
        acc.add_primary_key(column.name)
    acc.columns.append(column)


LineHandler = Callable[[_BodyAccumulator, re.Match, str], None]

LINE_RULES: tuple[tuple[re.Pattern, LineHandler], ...] = (
    (PRIMARY_KEY_CONSTRAINT, _on_primary_key),
    (FOREIGN_KEY_CONSTRAINT, _on_foreign_key),
    (OTHER_CONSTRAINT, _on_other_constraint),
    (COLUMN_DECLARATION, _on_column),
)


# ============================================================================
# Public API
# ============================================================================

def parse_table_body(body: str, table_name: str = "") -> ParsedTableBody:
    """Parse the text between the outer parens of a CREATE TABLE.

    Args:
        body: Table body text
        table_name: Owning table, used to name unnamed foreign keys

    Returns:
        ParsedTableBody with columns in declaration order. Every column whose
        name is in the primary-key list (inline or table-level) is flagged.
    """
    acc = _BodyAccumulator(table_name=table_name)

    for line in iter_logical_lines(body):
        for pattern, handler in LINE_RULES:
            match = pattern.match(line)
            if match:
                handler(acc, match, line)
                break
        else:
            logger.debug(f"Unrecognized line in {table_name}: {line[:60]}")

    pk_names = set(acc.primary_keys)
    columns = tuple(
        replace(col, is_primary_key=True) if col.name in pk_names and not col.is_primary_key else col
        for col in acc.columns
    )

    return ParsedTableBody(
        columns=columns,
        primary_keys=tuple(acc.primary_keys),
        foreign_keys=tuple(acc.foreign_keys),
    )


def iter_logical_lines(body: str) -> Iterator[str]:
    """Yield one whitespace-normalized declaration at a time.

    Comments are dropped first, then the body is split on top-level commas so
    a constraint wrapped over several physical lines arrives as one line.
    """
    for segment in split_outside_parens(strip_comments(body), ','):
        line = collapse_whitespace(segment)
        if line:
            yield line


def parse_column_definition(name: str, col_def: str) -> Column:
    """Build a Column from its name and the type-and-modifiers text.

    Args:
        name: Column name (quotes already removed)
        col_def: Everything after the name, e.g. ``varchar(255) NOT NULL``

    Returns:
        Column; inline PRIMARY KEY sets is_primary_key but not nullable
    """
    upper_def = col_def.upper()

    return Column(
        name=name,
        type=extract_column_type(col_def),
        nullable="NOT NULL" not in upper_def,
        default_value=extract_default_value(col_def),
        is_primary_key="PRIMARY KEY" in upper_def,
        is_unique="UNIQUE" in upper_def and "NOT UNIQUE" not in upper_def,
        check_constraint=extract_check_constraint(col_def),
    )


def extract_column_type(col_def: str) -> str:
    """Leading type expression with trailing modifier clauses removed."""
    match = TYPE_EXPRESSION.match(col_def)
    if not match:
        return col_def.split()[0] if col_def.split() else ""

    col_type = match.group(1)
    for clause in TYPE_TRAILING_CLAUSES:
        col_type = clause.sub('', col_type)
    col_type = col_type.strip()

    if not col_type:
        return col_def.split()[0]
    return col_type


def extract_default_value(col_def: str) -> str | None:
    """Expression after DEFAULT, up to the next top-level comma or whitespace.

    Function calls and quoted literals are captured whole.
    """
    match = DEFAULT_KEYWORD.search(col_def)
    if not match:
        return None

    depth = 0
    string_char = None
    end = match.end()

    while end < len(col_def):
        char = col_def[end]
        if string_char:
            if char == string_char:
                string_char = None
        elif char in ("'", '"'):
            string_char = char
        elif char == '(':
            depth += 1
        elif char == ')':
            if depth == 0:
                break
            depth -= 1
        elif depth == 0 and (char == ',' or char.isspace()):
            break
        end += 1

    value = col_def[match.end():end]
    return value or None


def extract_check_constraint(col_def: str) -> str | None:
    """Parenthesized expression following an inline CHECK."""
    match = CHECK_KEYWORD.search(col_def)
    if not match:
        return None

    open_index = match.end() - 1
    close_index = find_balanced_paren(col_def, open_index)
    if close_index == -1:
        return None
    return col_def[open_index + 1:close_index].strip() or None
