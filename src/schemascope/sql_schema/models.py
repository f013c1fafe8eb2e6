"""Value records produced by the DDL extraction engine.

Every record is a frozen dataclass; ordered collections are tuples so a
parsed schema can be cached and shared between requests without copying.
``to_dict()`` yields the camelCase wire shape consumed by the web API and
the schema-context linearizer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Column:
    """Column declared inside a CREATE TABLE body."""
    name: str
    type: str
    nullable: bool = True
    default_value: str | None = None
    is_primary_key: bool = False
    is_unique: bool = False
    check_constraint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "nullable": self.nullable,
            "defaultValue": self.default_value,
            "isPrimaryKey": self.is_primary_key,
            "isUnique": self.is_unique,
            "checkConstraint": self.check_constraint,
        }


@dataclass(frozen=True)
class ForeignKey:
    """Single-column FOREIGN KEY table constraint.

    The referenced table and column are kept verbatim, resolved or not.
    """
    column: str
    referenced_table: str
    referenced_column: str
    constraint_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "column": self.column,
            "referencedTable": self.referenced_table,
            "referencedColumn": self.referenced_column,
            "constraintName": self.constraint_name,
        }


@dataclass(frozen=True)
class RLSPolicy:
    """Row-level security policy with its derived plain-English summary."""
    name: str
    command: str  # SELECT, INSERT, UPDATE, DELETE, ALL
    roles: tuple[str, ...] = ("public",)
    using: str | None = None
    with_check: str | None = None
    permissive: bool = True
    plain_english: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "command": self.command,
            "roles": list(self.roles),
            "using": self.using,
            "withCheck": self.with_check,
            "permissive": self.permissive,
            "plainEnglish": self.plain_english,
        }


@dataclass(frozen=True)
class Table:
    """Assembled table model."""
    name: str
    schema: str = "public"
    columns: tuple[Column, ...] = ()
    primary_keys: tuple[str, ...] = ()
    foreign_keys: tuple[ForeignKey, ...] = ()
    rls_enabled: bool = False
    rls_policies: tuple[RLSPolicy, ...] = ()

    @property
    def denies_all_access(self) -> bool:
        """RLS is on but no policy grants anything."""
        return self.rls_enabled and not self.rls_policies

    def get_column(self, name: str) -> Column | None:
        return next((c for c in self.columns if c.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "schema": self.schema,
            "columns": [c.to_dict() for c in self.columns],
            "primaryKeys": list(self.primary_keys),
            "foreignKeys": [fk.to_dict() for fk in self.foreign_keys],
            "rlsEnabled": self.rls_enabled,
            "rlsPolicies": [p.to_dict() for p in self.rls_policies],
        }


@dataclass(frozen=True)
class SchemaStats:
    """Aggregate counts over a parsed schema."""
    total_tables: int = 0
    total_columns: int = 0
    total_relationships: int = 0
    total_rls_policies: int = 0
    tables_with_rls: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "totalTables": self.total_tables,
            "totalColumns": self.total_columns,
            "totalRelationships": self.total_relationships,
            "totalRLSPolicies": self.total_rls_policies,
            "tablesWithRLS": self.tables_with_rls,
        }


@dataclass(frozen=True)
class ParsedSchema:
    """Result of one parse: ordered tables plus their statistics."""
    tables: tuple[Table, ...] = ()
    stats: SchemaStats = field(default_factory=SchemaStats)

    def get_table(self, name: str) -> Table | None:
        return next((t for t in self.tables if t.name == name), None)

    @property
    def table_names(self) -> frozenset[str]:
        return frozenset(t.name for t in self.tables)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tables": [t.to_dict() for t in self.tables],
            "stats": self.stats.to_dict(),
        }
