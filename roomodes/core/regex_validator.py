"""
Regex checks for capability file restrictions.

Two separate concerns:
- The pattern must compile.
- The pattern must survive JSON serialization: a lone backslash in front of
  a non-backslash character (``\\.``) has to be written doubled.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

# A backslash not preceded by a backslash and followed by a non-backslash
SINGLE_BACKSLASH_ESCAPE = re.compile(r'(?<!\\)\\([^\\])')
_UNDOUBLED_BACKSLASH = re.compile(r'(?<!\\)\\(?=[^\\])')


@dataclass
class RegexIssue:
    """Issue found in a restriction pattern."""
    pattern: str
    issue_type: str  # 'invalid_syntax' or 'invalid_escaping'
    description: str


def compile_error(pattern: str) -> Optional[str]:
    """
    Try to compile ``pattern``.

    Returns:
        None if it compiles, otherwise the compiler's message
    """
    try:
        re.compile(pattern)
    except re.error as e:
        return str(e)
    return None


def has_invalid_escaping(pattern: str) -> bool:
    """Check for a single backslash followed by exactly one non-backslash."""
    return SINGLE_BACKSLASH_ESCAPE.search(pattern) is not None


def double_backslashes(pattern: str) -> str:
    """
    Re-escape a pattern by doubling every lone backslash.

    Example:
        >>> double_backslashes('\\\\.md$')
        '\\\\\\\\.md$'
    """
    return _UNDOUBLED_BACKSLASH.sub(r'\\\\', pattern)


def validate_pattern(pattern: str) -> List[RegexIssue]:
    """
    Validate a single restriction pattern.

    Escaping is only checked once the pattern compiles.

    Args:
        pattern: The regex pattern to validate

    Returns:
        List of issues found (empty if the pattern is fine)
    """
    message = compile_error(pattern)
    if message is not None:
        return [RegexIssue(
            pattern=pattern,
            issue_type='invalid_syntax',
            description=f'Pattern is invalid: {message}'
        )]

    if has_invalid_escaping(pattern):
        return [RegexIssue(
            pattern=pattern,
            issue_type='invalid_escaping',
            description='Pattern has invalid escaping for JSON'
        )]

    return []


def repair_pattern(pattern: str, fallback: str) -> str:
    """
    Produce a pattern that passes validate_pattern().

    Broken patterns become ``fallback``; badly escaped ones are doubled,
    unless doubling breaks compilation (e.g. an escaped parenthesis).
    """
    issues = validate_pattern(pattern)
    if not issues:
        return pattern

    if issues[0].issue_type == 'invalid_escaping':
        doubled = double_backslashes(pattern)
        if not validate_pattern(doubled):
            return doubled

    return fallback
