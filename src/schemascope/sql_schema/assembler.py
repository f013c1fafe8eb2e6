"""Schema assembler: the engine's single entry point.

Runs the locator, the table and policy parsers and the annotator over one
source text and returns an immutable ParsedSchema. Each call is independent;
nothing is cached between calls.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from .annotator import generate_plain_english
from .locator import locate_statements
from .models import ForeignKey, ParsedSchema, RLSPolicy, SchemaStats, Table
from .parser import parse_table_body
from .policies import parse_policy_body

logger = logging.getLogger(__name__)


def parse_schema(sql: str) -> ParsedSchema:
    """Parse DDL text into tables, relationships and RLS policies.

    Args:
        sql: Raw schema source (CREATE TABLE / CREATE POLICY / ALTER TABLE)

    Returns:
        ParsedSchema with tables in source order and aggregate stats
    """
    located = locate_statements(sql)

    policies_by_table: dict[str, list[RLSPolicy]] = defaultdict(list)
    for statement in located.policies:
        clauses = parse_policy_body(statement.body)
        policies_by_table[statement.table].append(RLSPolicy(
            name=statement.name,
            command=clauses.command,
            roles=clauses.roles,
            using=clauses.using,
            with_check=clauses.with_check,
            permissive=clauses.permissive,
            plain_english=generate_plain_english(statement.table, clauses),
        ))

    tables = []
    for statement in located.tables:
        body = parse_table_body(statement.body, statement.name)
        policies = tuple(policies_by_table.get(statement.name, ()))
        tables.append(Table(
            name=statement.name,
            schema=statement.schema,
            columns=body.columns,
            primary_keys=body.primary_keys,
            foreign_keys=body.foreign_keys,
            rls_enabled=statement.name in located.rls_enabled_tables or bool(policies),
            rls_policies=policies,
        ))

    orphaned = sorted(set(policies_by_table) - {t.name for t in tables})
    if orphaned:
        logger.debug(f"Policies reference tables not defined in source: {', '.join(orphaned)}")

    return ParsedSchema(tables=tuple(tables), stats=compute_stats(tables))


def compute_stats(tables: Iterable[Table]) -> SchemaStats:
    """Aggregate counts over assembled tables."""
    tables = list(tables)
    return SchemaStats(
        total_tables=len(tables),
        total_columns=sum(len(t.columns) for t in tables),
        total_relationships=sum(len(t.foreign_keys) for t in tables),
        total_rls_policies=sum(len(t.rls_policies) for t in tables),
        tables_with_rls=sum(1 for t in tables if t.rls_enabled),
    )


def unresolved_foreign_keys(schema: ParsedSchema) -> list[tuple[Table, ForeignKey]]:
    """Foreign keys whose referenced table is not defined in the source."""
    known = schema.table_names
    return [
        (table, fk)
        for table in schema.tables
        for fk in table.foreign_keys
        if fk.referenced_table not in known
    ]
