"""Schema warnings derived from a parsed schema.

Each warning names the affected tables and carries a ready-made prompt that
the chat endpoint can answer. RLS enabled with zero policies is reported as
an error: every query against such a table is denied.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from .assembler import unresolved_foreign_keys
from .models import ParsedSchema

Severity = Literal["error", "warning", "info"]

# Conventionally stands alone (auth-owned), not flagged as isolated.
ISOLATION_EXEMPT_TABLES = frozenset({"users"})


@dataclass(frozen=True)
class SchemaWarning:
    """One finding about the schema."""
    severity: Severity
    kind: str
    message: str
    tables: tuple[str, ...]
    chat_prompt: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.severity,
            "kind": self.kind,
            "message": self.message,
            "tables": list(self.tables),
            "chatPrompt": self.chat_prompt,
        }


def find_schema_warnings(schema: ParsedSchema) -> list[SchemaWarning]:
    """Run every check in a fixed order."""
    if not schema.tables:
        return []

    checks = (
        _missing_primary_keys,
        _tables_without_rls,
        _rls_without_policies,
        _isolated_tables,
        _unresolved_references,
    )
    warnings = []
    for check in checks:
        warning = check(schema)
        if warning is not None:
            warnings.append(warning)
    return warnings


def _missing_primary_keys(schema: ParsedSchema) -> SchemaWarning | None:
    names = tuple(t.name for t in schema.tables if not any(c.is_primary_key for c in t.columns))
    if not names:
        return None
    listed = ", ".join(names)
    return SchemaWarning(
        severity="error",
        kind="missing_primary_key",
        message=f"{len(names)} table(s) missing primary key: {listed}",
        tables=names,
        chat_prompt=(
            f"The following tables are missing primary keys: {listed}\n\n"
            "Please explain:\n"
            "1. Why is having a primary key critical for these tables?\n"
            "2. What problems can occur without primary keys?\n"
            "3. What would you recommend as primary keys for each of these tables?\n"
            "4. Provide the SQL to add primary keys to fix this issue."
        ),
    )


def _tables_without_rls(schema: ParsedSchema) -> SchemaWarning | None:
    names = tuple(t.name for t in schema.tables if not t.rls_enabled)
    if not names:
        return None
    listed = ", ".join(names)
    return SchemaWarning(
        severity="warning",
        kind="rls_disabled",
        message=f"{len(names)} table(s) without RLS policies: {listed}",
        tables=names,
        chat_prompt=(
            f"The following tables have no Row Level Security (RLS) policies: {listed}\n\n"
            "Please explain:\n"
            "1. What security risks does this pose?\n"
            "2. For a multi-tenant application, why is RLS important for each of these tables?\n"
            "3. Provide example RLS policies I should add to secure these tables properly.\n"
            "4. Show the SQL to enable RLS and create appropriate policies."
        ),
    )


def _rls_without_policies(schema: ParsedSchema) -> SchemaWarning | None:
    names = tuple(t.name for t in schema.tables if t.denies_all_access)
    if not names:
        return None
    listed = ", ".join(names)
    return SchemaWarning(
        severity="error",
        kind="rls_without_policies",
        message=f"{len(names)} table(s) have RLS enabled but no policies (blocks all access): {listed}",
        tables=names,
        chat_prompt=(
            f"CRITICAL: The following tables have RLS enabled but NO policies defined: {listed}\n\n"
            "This means ALL access to these tables is currently BLOCKED!\n\n"
            "Please explain:\n"
            "1. Why is this a critical issue?\n"
            "2. How does RLS work when enabled with no policies?\n"
            "3. What policies should I add to restore access while maintaining security?\n"
            "4. Provide the SQL to create appropriate RLS policies for each table."
        ),
    )


def _isolated_tables(schema: ParsedSchema) -> SchemaWarning | None:
    referenced = {fk.referenced_table for t in schema.tables for fk in t.foreign_keys}
    names = tuple(
        t.name for t in schema.tables
        if not t.foreign_keys
        and t.name not in referenced
        and t.name not in ISOLATION_EXEMPT_TABLES
    )
    if not names:
        return None
    listed = ", ".join(names)
    return SchemaWarning(
        severity="info",
        kind="isolated_table",
        message=f"{len(names)} isolated table(s) with no relationships: {listed}",
        tables=names,
        chat_prompt=(
            f"The following tables have no foreign key relationships (isolated): {listed}\n\n"
            "Please analyze:\n"
            "1. Is this intentional for these tables, or is it a design issue?\n"
            "2. Looking at the table structure, should any of these tables have relationships to other tables?\n"
            "3. What foreign keys would you recommend adding?\n"
            "4. Provide SQL to add appropriate foreign key relationships if needed."
        ),
    )


def _unresolved_references(schema: ParsedSchema) -> SchemaWarning | None:
    dangling = unresolved_foreign_keys(schema)
    if not dangling:
        return None

    names = tuple(dict.fromkeys(table.name for table, _ in dangling))
    details = "; ".join(
        f"{table.name}.{fk.column} -> {fk.referenced_table}({fk.referenced_column})"
        for table, fk in dangling
    )
    return SchemaWarning(
        severity="warning",
        kind="unresolved_reference",
        message=f"{len(dangling)} foreign key(s) reference tables not defined in this file: {details}",
        tables=names,
        chat_prompt=(
            f"These foreign keys point at tables that are not defined in this schema file: {details}\n\n"
            "Please explain:\n"
            "1. Are these likely tables from another schema (for example auth.users)?\n"
            "2. What breaks if the referenced tables do not exist?\n"
            "3. How should I document or create the missing tables?"
        ),
    )
