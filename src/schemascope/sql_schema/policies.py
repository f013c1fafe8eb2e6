"""CREATE POLICY body parser.

Extracts the governed command, role, permissiveness and the ``USING`` /
``WITH CHECK`` predicates. Predicates are cut at the paren that balances
the clause's opening paren, so nested calls such as
``EXISTS (SELECT 1 FROM t WHERE ...)`` survive intact.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from .scanning import find_balanced_paren, strip_comments, strip_identifier_quotes

POLICY_COMMANDS = ("ALL", "SELECT", "INSERT", "UPDATE", "DELETE")

COMMAND_PATTERN = re.compile(r'\bFOR\s+(ALL|SELECT|INSERT|UPDATE|DELETE)\b', re.IGNORECASE)

# Only the first role of a TO list is captured.
ROLE_PATTERN = re.compile(r'\bTO\s+["`]?(\w+)', re.IGNORECASE)

RESTRICTIVE_PATTERN = re.compile(r'\bAS\s+RESTRICTIVE\b', re.IGNORECASE)

USING_PATTERN = re.compile(r'\bUSING\s*\(([\s\S]*)\)(?:\s*WITH\s+CHECK|\s*\Z)', re.IGNORECASE)

WITH_CHECK_PATTERN = re.compile(r'\bWITH\s+CHECK\s*\(([\s\S]*)\)\s*\Z', re.IGNORECASE)

# Command, role and permissiveness all precede the first predicate clause.
PREDICATE_START = re.compile(r'\bUSING\s*\(|\bWITH\s+CHECK\s*\(', re.IGNORECASE)


@dataclass(frozen=True)
class PolicyClauses:
    """Policy fields recovered from a body, before annotation."""
    command: str = "ALL"
    roles: tuple[str, ...] = ("public",)
    using: str | None = None
    with_check: str | None = None
    permissive: bool = True


def parse_policy_body(body: str) -> PolicyClauses:
    """Parse the text that follows ``CREATE POLICY "<name>" ON <table>``.

    Args:
        body: Policy body, possibly followed by unrelated statements

    Returns:
        PolicyClauses; command defaults to ALL and roles to ("public",)
    """
    statement = _first_statement(strip_comments(body))
    head = _clause_head(statement)

    command_match = COMMAND_PATTERN.search(head)
    command = command_match.group(1).upper() if command_match else "ALL"

    role_match = ROLE_PATTERN.search(head)
    roles = (strip_identifier_quotes(role_match.group(1)),) if role_match else ("public",)

    return PolicyClauses(
        command=command,
        roles=roles,
        using=extract_using_clause(statement),
        with_check=extract_with_check_clause(statement),
        permissive=not RESTRICTIVE_PATTERN.search(head),
    )


def extract_using_clause(statement: str) -> str | None:
    """USING predicate, cut where paren depth would go negative."""
    match = USING_PATTERN.search(statement)
    if not match:
        return None

    candidate = match.group(1)
    # Re-open the clause paren so the balancing scan sees the whole predicate.
    close_index = find_balanced_paren('(' + candidate + ')', 0)
    if close_index == -1:
        return candidate.strip()
    return candidate[:close_index - 1].strip()


def extract_with_check_clause(statement: str) -> str | None:
    """WITH CHECK predicate, anchored to the end of the statement."""
    match = WITH_CHECK_PATTERN.search(statement)
    if not match:
        return None
    return match.group(1).strip()


def _first_statement(body: str) -> str:
    """Cut the body at its first top-level ``;``.

    The locator's policy span runs to the next CREATE, which can swallow a
    following ALTER TABLE; the clause patterns are anchored to the end of
    the policy statement itself.
    """
    depth = 0
    string_char = None
    for i, char in enumerate(body):
        if string_char:
            if char == string_char:
                string_char = None
        elif char in ("'", '"'):
            string_char = char
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
        elif char == ';' and depth <= 0:
            return body[:i].rstrip()
    return body.rstrip()


def _clause_head(statement: str) -> str:
    """Text before the first USING / WITH CHECK clause."""
    match = PREDICATE_START.search(statement)
    return statement[:match.start()] if match else statement
