"""DDL and row-level-security extraction engine.

Provides a pure text-in, model-out pipeline for SQL schema files:
- Locate CREATE TABLE, CREATE POLICY and ENABLE ROW LEVEL SECURITY statements
- Parse columns, primary keys and foreign keys from table bodies
- Parse policy commands, roles and USING / WITH CHECK predicates
- Explain each policy in plain English
- Linearize the model for chat context and derive schema warnings
"""
from __future__ import annotations

from .models import (
    Column,
    ForeignKey,
    RLSPolicy,
    Table,
    SchemaStats,
    ParsedSchema,
)

from .locator import (
    PolicyStatement,
    TableStatement,
    LocatedStatements,
    locate_statements,
)

from .parser import (
    ParsedTableBody,
    parse_table_body,
    parse_column_definition,
)

from .policies import (
    PolicyClauses,
    parse_policy_body,
)

from .annotator import (
    Idiom,
    USING_IDIOMS,
    WITH_CHECK_IDIOMS,
    generate_plain_english,
)

from .assembler import (
    parse_schema,
    compute_stats,
    unresolved_foreign_keys,
)

from .context import build_schema_context

from .diagnostics import (
    SchemaWarning,
    find_schema_warnings,
)

__all__ = [
    # Models
    "Column",
    "ForeignKey",
    "RLSPolicy",
    "Table",
    "SchemaStats",
    "ParsedSchema",
    # Locator
    "PolicyStatement",
    "TableStatement",
    "LocatedStatements",
    "locate_statements",
    # Parsers
    "ParsedTableBody",
    "parse_table_body",
    "parse_column_definition",
    "PolicyClauses",
    "parse_policy_body",
    # Annotator
    "Idiom",
    "USING_IDIOMS",
    "WITH_CHECK_IDIOMS",
    "generate_plain_english",
    # Assembler
    "parse_schema",
    "compute_stats",
    "unresolved_foreign_keys",
    # Consumers
    "build_schema_context",
    "SchemaWarning",
    "find_schema_warnings",
]
