"""Flatten a parsed schema into the text block handed to the chat model.

The layout is a contract with the chat prompts: one summary block, then one
block per table listing columns, foreign keys and RLS policies.
"""
from __future__ import annotations

from .models import Column, ParsedSchema, Table


def format_column(column: Column) -> str:
    definition = f"  {column.name} {column.type}"
    if column.is_primary_key:
        definition += " PRIMARY KEY"
    if not column.nullable:
        definition += " NOT NULL"
    if column.is_unique:
        definition += " UNIQUE"
    if column.default_value:
        definition += f" DEFAULT {column.default_value}"
    return definition


def format_table(table: Table) -> str:
    """One table block, header line included."""
    lines = [f"TABLE {table.name} (schema: {table.schema}):"]
    lines.extend(format_column(c) for c in table.columns)
    lines.extend(
        f"  FOREIGN KEY ({fk.column}) REFERENCES {fk.referenced_table}({fk.referenced_column})"
        for fk in table.foreign_keys
    )

    if table.rls_enabled:
        lines.append("  -- RLS ENABLED")
        if table.rls_policies:
            lines.append("  -- Policies:")
            lines.extend(
                f"  --   {p.name} ({p.command}): {p.plain_english}"
                for p in table.rls_policies
            )
        else:
            lines.append("  -- NO POLICIES: all access is denied")

    return "\n".join(lines)


def build_schema_context(schema: ParsedSchema) -> str:
    """Linearize the whole schema; empty schema gives an empty string."""
    if not schema.tables:
        return ""

    stats = schema.stats
    summary = (
        "DATABASE SUMMARY:\n"
        f"- Total Tables: {stats.total_tables}\n"
        f"- Total Columns: {stats.total_columns}\n"
        f"- Total Foreign Keys: {stats.total_relationships}\n"
        f"- Tables with RLS: {stats.tables_with_rls}\n"
        "\n"
    )

    return summary + "\n\n".join(format_table(t) for t in schema.tables)
