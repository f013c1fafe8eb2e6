"""Low-level text scanning helpers shared by the statement locator and parsers.

These are structural helpers, not a lexer: they know about parentheses,
single/double quoted literals and ``--`` / ``/* */`` comments, nothing else.
``split_outside_parens`` expects text already passed through
``strip_comments``.
"""
from __future__ import annotations

import re

_QUOTE_CHARS = ('"', '`')
_BLOCK_COMMENT = re.compile(r'/\*.*?\*/', re.DOTALL)


def find_balanced_paren(text: str, start: int) -> int:
    """Find the position of the closing parenthesis that balances the opening one.

    String literals, ``--`` line comments and ``/* */`` block comments are
    skipped so that a stray paren or apostrophe inside them does not
    unbalance the count.

    Args:
        text: The text to search in
        start: Position of the opening parenthesis

    Returns:
        Position of the closing parenthesis, or -1 if not found
    """
    if start >= len(text) or text[start] != '(':
        return -1

    depth = 0
    string_char = None
    i = start
    length = len(text)

    while i < length:
        char = text[i]

        if string_char:
            if char == string_char:
                # Doubled quote is an escaped quote inside the literal
                if i + 1 < length and text[i + 1] == string_char:
                    i += 2
                    continue
                string_char = None
        elif char in ("'", '"'):
            string_char = char
        elif char == '-' and text.startswith('--', i):
            newline = text.find('\n', i)
            if newline == -1:
                return -1
            i = newline
        elif char == '/' and text.startswith('/*', i):
            comment_end = text.find('*/', i + 2)
            if comment_end == -1:
                return -1
            i = comment_end + 1
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return i

        i += 1

    return -1


def split_outside_parens(text: str, delimiter: str = ',') -> list[str]:
    """Split text on delimiter but not inside parentheses or quoted literals."""
    parts = []
    current = []
    depth = 0
    string_char = None

    for char in text:
        if string_char:
            if char == string_char:
                string_char = None
            current.append(char)
        elif char in ("'", '"'):
            string_char = char
            current.append(char)
        elif char == '(':
            depth += 1
            current.append(char)
        elif char == ')':
            depth -= 1
            current.append(char)
        elif char == delimiter and depth == 0:
            parts.append(''.join(current))
            current = []
        else:
            current.append(char)

    if current:
        parts.append(''.join(current))

    return parts


def strip_comments(text: str) -> str:
    """Remove block comments and ``--`` line comments that sit outside literals."""
    text = _BLOCK_COMMENT.sub(' ', text)

    lines = []
    for line in text.split('\n'):
        lines.append(_strip_line_comment(line))
    return '\n'.join(lines)


def _strip_line_comment(line: str) -> str:
    string_char = None
    for i, char in enumerate(line):
        if string_char:
            if char == string_char:
                string_char = None
        elif char in ("'", '"'):
            string_char = char
        elif char == '-' and line.startswith('--', i):
            return line[:i]
    return line


def strip_identifier_quotes(identifier: str) -> str:
    """Drop double quotes and backticks from an identifier."""
    for quote in _QUOTE_CHARS:
        identifier = identifier.replace(quote, '')
    return identifier.strip()


def split_qualified_name(raw: str) -> tuple[str | None, str]:
    """Split ``schema.name`` (quoted or not) into its parts.

    Returns:
        (schema or None, bare name)
    """
    name = strip_identifier_quotes(raw)
    if '.' in name:
        schema, bare = name.rsplit('.', 1)
        return schema or None, bare
    return None, name


def collapse_whitespace(text: str) -> str:
    return ' '.join(text.split())
