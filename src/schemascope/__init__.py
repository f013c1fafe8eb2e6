"""schemascope: explore SQL schema files, their relationships and RLS policies."""

__version__ = "0.1.0"
