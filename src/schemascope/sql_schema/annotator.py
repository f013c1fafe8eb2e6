"""Plain-English summaries for RLS policies.

Predicates are matched against ranked idiom catalogues; the first idiom that
matches contributes the clause fragment. Order is significant: two-sided
patterns (sender OR recipient) must be tried before their one-sided subsets.
The annotator is total and deterministic: identical input always yields the
identical string.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from .policies import PolicyClauses

COMMAND_ACTIONS = {
    "SELECT": "view",
    "INSERT": "create",
    "UPDATE": "modify",
    "DELETE": "remove",
    "ALL": "access",
}

ROLE_LABELS = {
    "public": "Anyone (including anonymous)",
    "authenticated": "Logged-in users",
    "anon": "Anonymous users",
    "service_role": "Service/backend only",
}

MAX_LITERAL_PREDICATE = 60


@dataclass(frozen=True)
class Idiom:
    """A recognized predicate shape and the prose fragment it maps to.

    ``fragment`` of None means the idiom is recognized but adds nothing.
    """
    name: str
    pattern: re.Pattern
    fragment: str | None

    def matches(self, predicate: str) -> bool:
        return bool(self.pattern.search(predicate))


def _idiom(name: str, pattern: str, fragment: str | None, flags: int = re.IGNORECASE) -> Idiom:
    return Idiom(name, re.compile(pattern, flags), fragment)


USING_IDIOMS: tuple[Idiom, ...] = (
    _idiom("owner_user_id", r"auth\.uid\(\)\s*=\s*user_id",
           "only their own data (where user_id matches their login)"),
    _idiom("owner_id", r"auth\.uid\(\)\s*=\s*id", "only their own record"),
    _idiom("sender_or_recipient",
           r"auth\.uid\(\)\s*=\s*sender_id\s+OR\s+auth\.uid\(\)\s*=\s*recipient_id",
           "only messages they sent or received"),
    _idiom("sender", r"auth\.uid\(\)\s*=\s*sender_id", "only messages they sent"),
    _idiom("recipient", r"auth\.uid\(\)\s*=\s*recipient_id", "only messages they received"),
    _idiom("published", r"is_published\s*=\s*true", "only published content"),
    _idiom("authenticated_role", r"auth\.role\(\)\s*=\s*'authenticated'", "only if logged in"),
    _idiom("anon_role", r"auth\.role\(\)\s*=\s*'anon'", "even without logging in"),
    _idiom("admin_auth_role", r"auth\.role\(\)\s*=\s*'admin'", "only admins"),
    _idiom("admin_role_column", r"role\s*=\s*'admin'", "only users with admin role"),
    _idiom("moderator_role_column", r"role\s*=\s*'moderator'", "only moderators"),
    _idiom("exists_admin", r"EXISTS.*role\s*=\s*'admin'", "only if user is an admin"),
    _idiom("exists_moderator", r"EXISTS.*role\s*=\s*'moderator'", "only if user is a moderator"),
    _idiom("exists_published", r"EXISTS.*is_published\s*=\s*true", "only on published posts"),
    _idiom("is_admin_flag", r"is_admin", "only if they are an admin"),
    # Literal predicates compare exactly, case included
    _idiom("literal_true", r"\A(?:true|\(true\))\Z", "unrestricted", flags=0),
    _idiom("literal_false", r"\A(?:false|\(false\))\Z", "access blocked", flags=0),
)

WITH_CHECK_IDIOMS: tuple[Idiom, ...] = (
    _idiom("owner_user_id", r"auth\.uid\(\)\s*=\s*user_id", "Must set user_id to own ID"),
    _idiom("sender", r"auth\.uid\(\)\s*=\s*sender_id", "Must be the sender"),
    _idiom("owner_id", r"auth\.uid\(\)\s*=\s*id", "Can only modify own record"),
    _idiom("literal_true", r"\A(?:true|\(true\))\Z", None, flags=0),
)


def match_idiom(predicate: str, catalogue: tuple[Idiom, ...]) -> Idiom | None:
    """First idiom in catalogue order that matches the trimmed predicate."""
    cleaned = predicate.strip()
    for idiom in catalogue:
        if idiom.matches(cleaned):
            return idiom
    return None


def describe_roles(roles: tuple[str, ...] | list[str]) -> str:
    """Friendly role list; empty or any ``public`` collapses to "Anyone"."""
    if not roles or any(role.lower() == "public" for role in roles):
        return "Anyone"
    return ", ".join(ROLE_LABELS.get(role.lower(), role) for role in roles)


def describe_action(command: str) -> str:
    return COMMAND_ACTIONS.get(command, command.lower())


def truncate_predicate(predicate: str, limit: int = MAX_LITERAL_PREDICATE) -> str:
    if len(predicate) > limit:
        return predicate[:limit] + "..."
    return predicate


def describe_using(predicate: str) -> str:
    """Fragment for a USING predicate, literal rendering when no idiom fits."""
    idiom = match_idiom(predicate, USING_IDIOMS)
    if idiom is not None:
        return idiom.fragment
    return f"condition: {truncate_predicate(predicate.strip())}"


def describe_with_check(predicate: str) -> str | None:
    """Fragment for a WITH CHECK predicate; None when nothing should be added."""
    idiom = match_idiom(predicate, WITH_CHECK_IDIOMS)
    if idiom is not None:
        return idiom.fragment
    return "Validation required"


def generate_plain_english(table_name: str, policy: PolicyClauses) -> str:
    """Explain a policy in one sentence.

    Args:
        table_name: Table the policy is attached to
        policy: Parsed policy fields (everything but the prose)

    Returns:
        e.g. "Logged-in users can view rows — only their own data (...)"
    """
    action = describe_action(policy.command)

    if policy.permissive:
        explanation = f"{describe_roles(policy.roles)} can {action} rows"
    else:
        explanation = f"Restricts who can {action} rows"

    if policy.using:
        explanation += f" — {describe_using(policy.using)}"

    if policy.with_check and policy.command != "SELECT":
        fragment = describe_with_check(policy.with_check)
        if fragment:
            explanation += f". {fragment}"

    return explanation
