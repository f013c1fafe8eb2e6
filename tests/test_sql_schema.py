"""Tests for the CREATE TABLE body parser.

Tests cover:
- Column declarations (types, nullability, defaults, checks)
- Table-level PRIMARY KEY and FOREIGN KEY constraints
- Lines that are skipped (other constraints, comments)
- Text scanning helpers
"""
import pytest

from schemascope.sql_schema.models import Column, ForeignKey
from schemascope.sql_schema.parser import (
    ParsedTableBody,
    extract_check_constraint,
    extract_column_type,
    extract_default_value,
    iter_logical_lines,
    parse_column_definition,
    parse_table_body,
)
from schemascope.sql_schema.scanning import (
    find_balanced_paren,
    split_outside_parens,
    split_qualified_name,
    strip_comments,
)


# =============================================================================
# Column Parsing Tests
# =============================================================================

class TestColumnParsing:
    """Test column declarations inside a table body."""

    def test_simple_columns(self):
        """Should parse names and types in declaration order."""
        body = """
            id UUID PRIMARY KEY,
            email TEXT NOT NULL,
            name TEXT,
            created_at TIMESTAMPTZ DEFAULT now()
        """
        parsed = parse_table_body(body, "users")

        assert [c.name for c in parsed.columns] == ["id", "email", "name", "created_at"]
        assert [c.type for c in parsed.columns] == ["UUID", "TEXT", "TEXT", "TIMESTAMPTZ"]

        id_col = parsed.columns[0]
        assert id_col.is_primary_key is True
        # Inline PRIMARY KEY does not change nullability
        assert id_col.nullable is True

        assert parsed.columns[1].nullable is False
        assert parsed.columns[3].default_value == "now()"
        assert parsed.primary_keys == ("id",)

    def test_parameterized_types(self):
        """Precision and length stay part of the type."""
        parsed = parse_table_body(
            "username varchar(50) NOT NULL UNIQUE, amount numeric(10, 2) CHECK (amount > 0)"
        )
        username, amount = parsed.columns

        assert username.type == "varchar(50)"
        assert username.is_unique is True
        assert amount.type == "numeric(10, 2)"
        assert amount.check_constraint == "amount > 0"

    def test_multi_word_and_array_types(self):
        """Multi-word types and array suffixes are kept whole."""
        parsed = parse_table_body(
            "created_at timestamp with time zone DEFAULT now() NOT NULL,\n"
            "tags text[],\n"
            "scores integer ARRAY"
        )
        created_at, tags, scores = parsed.columns

        assert created_at.type == "timestamp with time zone"
        assert created_at.default_value == "now()"
        assert created_at.nullable is False
        assert tags.type == "text[]"
        assert scores.type == "integer ARRAY"

    def test_quoted_column_name(self):
        """Quoted names keep their spaces and lose their quotes."""
        parsed = parse_table_body('"Order Date" date NOT NULL')

        assert parsed.columns == (
            Column(name="Order Date", type="date", nullable=False),
        )

    def test_identity_column(self):
        """GENERATED ... AS IDENTITY is neither a type nor a default."""
        parsed = parse_table_body(
            "id bigint GENERATED ALWAYS AS IDENTITY PRIMARY KEY,\n"
            "seq int GENERATED BY DEFAULT AS IDENTITY"
        )
        id_col, seq = parsed.columns

        assert id_col.type == "bigint"
        assert id_col.default_value is None
        assert id_col.is_primary_key is True
        assert seq.type == "int"
        assert seq.default_value is None

    def test_inline_references_is_not_a_foreign_key(self):
        """Only table-level FOREIGN KEY constraints produce relationships."""
        parsed = parse_table_body("user_id uuid REFERENCES users(id) ON DELETE CASCADE")

        assert parsed.columns[0].type == "uuid"
        assert parsed.foreign_keys == ()

    def test_comments_are_ignored(self):
        """Line and block comments never become columns."""
        body = """
            -- primary key
            id int PRIMARY KEY, -- trailing note
            /* legacy, unused */
            name text
        """
        parsed = parse_table_body(body)

        assert [c.name for c in parsed.columns] == ["id", "name"]

    def test_empty_body(self):
        """An empty body yields an empty result."""
        assert parse_table_body("") == ParsedTableBody()


class TestColumnDefinition:
    """Test the per-column extraction helpers."""

    @pytest.mark.parametrize("col_def,expected", [
        ("text", "text"),
        ("text NULL", "text"),
        ("varchar(255) NOT NULL DEFAULT 'x'", "varchar(255)"),
        ("double precision", "double precision"),
        ("public.mood COLLATE \"C\"", "public.mood"),
        ("uuid REFERENCES users(id)", "uuid"),
    ])
    def test_extract_column_type(self, col_def, expected):
        """Trailing clauses are cut from the type expression."""
        assert extract_column_type(col_def) == expected

    @pytest.mark.parametrize("col_def,expected", [
        ("text DEFAULT 'member'", "'member'"),
        ("text DEFAULT 'a b' NOT NULL", "'a b'"),
        ("uuid DEFAULT gen_random_uuid() PRIMARY KEY", "gen_random_uuid()"),
        ("boolean DEFAULT false,", "false"),
        ("int GENERATED BY DEFAULT AS IDENTITY", None),
        ("text NOT NULL", None),
    ])
    def test_extract_default_value(self, col_def, expected):
        """DEFAULT expressions are captured up to whitespace at depth zero."""
        assert extract_default_value(col_def) == expected

    def test_extract_check_constraint_nested(self):
        """Nested parens inside CHECK are balanced."""
        col_def = "text CHECK (role IN ('member', 'admin')) DEFAULT 'member'"
        assert extract_check_constraint(col_def) == "role IN ('member', 'admin')"

    def test_not_unique_is_not_unique(self):
        """NOT UNIQUE does not set the unique flag."""
        assert parse_column_definition("x", "int NOT UNIQUE").is_unique is False

    def test_unique_column(self):
        """UNIQUE sets the unique flag."""
        column = parse_column_definition("email", "text UNIQUE NOT NULL")

        assert column.is_unique is True
        assert column.nullable is False


# =============================================================================
# Constraint Parsing Tests
# =============================================================================

class TestConstraintParsing:
    """Test table-level constraints."""

    def test_named_primary_key(self):
        """Table-level PRIMARY KEY flags the named column."""
        parsed = parse_table_body(
            "id uuid NOT NULL,\nCONSTRAINT profiles_pkey PRIMARY KEY (id)", "profiles"
        )

        assert parsed.primary_keys == ("id",)
        assert parsed.columns[0].is_primary_key is True
        assert parsed.columns[0].nullable is False

    def test_composite_primary_key(self):
        """Every column of a composite key is flagged, in key order."""
        parsed = parse_table_body(
            "post_id int, tag_id int, note text, PRIMARY KEY (tag_id, post_id)"
        )

        assert parsed.primary_keys == ("tag_id", "post_id")
        assert [c.is_primary_key for c in parsed.columns] == [True, True, False]

    def test_inline_and_table_primary_key_are_merged(self):
        """A column named by both forms appears once."""
        parsed = parse_table_body("id int PRIMARY KEY, PRIMARY KEY (id)")
        assert parsed.primary_keys == ("id",)

    def test_named_foreign_key(self):
        """Named FOREIGN KEY constraints keep their name; schema is dropped."""
        parsed = parse_table_body(
            "id uuid,\n"
            "CONSTRAINT profiles_id_fkey FOREIGN KEY (id) REFERENCES auth.users(id) ON DELETE CASCADE",
            "profiles",
        )

        assert parsed.foreign_keys == (
            ForeignKey(
                column="id",
                referenced_table="users",
                referenced_column="id",
                constraint_name="profiles_id_fkey",
            ),
        )

    def test_unnamed_foreign_key_gets_default_name(self):
        """Unnamed FOREIGN KEY constraints are named <table>_<column>_fkey."""
        parsed = parse_table_body(
            "user_id uuid, FOREIGN KEY (user_id) REFERENCES public.profiles(id)", "posts"
        )

        fk = parsed.foreign_keys[0]
        assert fk.constraint_name == "posts_user_id_fkey"
        assert fk.referenced_table == "profiles"

    def test_quoted_foreign_key(self):
        """Quotes are stripped from every part of the constraint."""
        parsed = parse_table_body(
            'CONSTRAINT "fk_author" FOREIGN KEY ("author_id") REFERENCES "authors" ("id")', "books"
        )

        fk = parsed.foreign_keys[0]
        assert fk.constraint_name == "fk_author"
        assert fk.column == "author_id"
        assert fk.referenced_table == "authors"
        assert fk.referenced_column == "id"

    def test_foreign_key_wrapped_over_lines(self):
        """A constraint split across physical lines is still recognized."""
        parsed = parse_table_body(
            "author_id int,\n"
            "CONSTRAINT books_author_fkey FOREIGN KEY (author_id)\n"
            "    REFERENCES authors(id)",
            "books",
        )

        assert len(parsed.foreign_keys) == 1
        assert parsed.foreign_keys[0].referenced_table == "authors"

    @pytest.mark.parametrize("line", [
        "UNIQUE (email)",
        "CHECK (price > 0)",
        "CONSTRAINT email_unique UNIQUE (email)",
        "CONSTRAINT price_positive CHECK (price > 0)",
        "EXCLUDE USING gist (room WITH =)",
        "LIKE other_table INCLUDING ALL",
    ])
    def test_other_constraints_are_skipped(self, line):
        """Constraint-like lines never become columns."""
        parsed = parse_table_body(f"id int, {line}")
        assert [c.name for c in parsed.columns] == ["id"]


# =============================================================================
# Scanning Helper Tests
# =============================================================================

class TestScanningHelpers:
    """Test paren balancing and splitting."""

    def test_find_balanced_paren(self):
        """Should return the index of the matching close paren."""
        text = "(a (b) 'c)' d)"
        assert find_balanced_paren(text, 0) == len(text) - 1

    def test_find_balanced_paren_escaped_quote(self):
        """Doubled quotes stay inside the literal."""
        text = "('it''s (here')"
        assert find_balanced_paren(text, 0) == len(text) - 1

    def test_find_balanced_paren_skips_line_comment(self):
        """A paren inside a -- comment is ignored."""
        text = "(a -- not ) here\n)"
        assert find_balanced_paren(text, 0) == len(text) - 1

    def test_find_balanced_paren_skips_block_comment(self):
        """Parens and quotes inside /* */ comments are ignored."""
        text = "(a /* ) it's */ b)"
        assert find_balanced_paren(text, 0) == len(text) - 1

    def test_find_balanced_paren_unterminated_block_comment(self):
        assert find_balanced_paren("(a /* )", 0) == -1

    def test_find_balanced_paren_unbalanced(self):
        """Returns -1 when the paren never closes or start is not a paren."""
        assert find_balanced_paren("(a (b)", 0) == -1
        assert find_balanced_paren("abc", 0) == -1

    def test_split_outside_parens(self):
        """Commas inside parens and quotes do not split."""
        parts = split_outside_parens("a numeric(10, 2), b text DEFAULT 'x,y', c int")
        assert [p.strip() for p in parts] == [
            "a numeric(10, 2)", "b text DEFAULT 'x,y'", "c int",
        ]

    def test_strip_comments_keeps_literals(self):
        """-- inside a string literal is not a comment."""
        assert strip_comments("a text DEFAULT '--x' -- note") == "a text DEFAULT '--x' "

    @pytest.mark.parametrize("raw,expected", [
        ("users", (None, "users")),
        ("public.users", ("public", "users")),
        ('"auth"."users"', ("auth", "users")),
    ])
    def test_split_qualified_name(self, raw, expected):
        """Schema qualifier and quotes are separated from the name."""
        assert split_qualified_name(raw) == expected

    def test_iter_logical_lines_collapses_whitespace(self):
        """Each logical line is a single-spaced declaration."""
        lines = list(iter_logical_lines("id   int,\n\n  name\n   text  "))
        assert lines == ["id int", "name text"]
