"""
Loading .roomodes documents.

parse() turns raw text into a Document and locates the records container.
It raises StructuralError (or its ParseError subclass) when nothing can be
validated at all; anything less severe is recorded as a diagnostic.
"""

import json
import logging
from pathlib import Path
from typing import Any

from .base import Category, Document, ParseError, StructuralError, warning
from .rules import DEFAULT_RULES, ValidationRules

logger = logging.getLogger(__name__)


def parse(text: str, rules: ValidationRules = DEFAULT_RULES) -> Document:
    """
    Parse .roomodes text.

    Args:
        text: Raw document text
        rules: Rule tables (container key names)

    Returns:
        Document with any structural diagnostics attached

    Raises:
        ParseError: If the text is not valid JSON
        StructuralError: If the records container is missing or not an array
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON syntax: {e.msg}", e.lineno, e.colno) from e

    if not isinstance(raw, dict):
        raise StructuralError(
            f"Top level must be an object, got {json_type(raw)}. "
            f'File should have structure: {{ "{rules.canonical_key}": [ ... ] }}'
        )

    canonical, alias = rules.canonical_key, rules.alias_key
    diagnostics = []

    if canonical in raw:
        key = canonical
        if alias in raw:
            diagnostics.append(warning(
                'container-both-keys',
                f'Both "{canonical}" and "{alias}" are present; "{alias}" is ignored',
                None, category=Category.STRUCTURAL
            ))
    elif alias in raw:
        key = alias
        diagnostics.append(warning(
            'container-alias',
            f'Using deprecated "{alias}" key instead of "{canonical}"',
            None, fixable=True, category=Category.STRUCTURAL
        ))
    else:
        raise StructuralError(
            f'Missing "{canonical}" or "{alias}" array. '
            f'File should have structure: {{ "{canonical}": [ ... ] }}'
        )

    records = raw[key]
    if not isinstance(records, list):
        raise StructuralError(f'"{key}" must be an array, got {json_type(records)}')

    if not records:
        diagnostics.append(warning(
            'container-empty', 'No custom modes defined in the file',
            None, category=Category.STRUCTURAL
        ))

    logger.debug(f"Found {len(records)} record(s) under '{key}'")

    return Document(
        raw=raw,
        container_key=key,
        records=tuple(records),
        diagnostics=tuple(diagnostics)
    )


def read_document_text(path: Path, max_size: int = DEFAULT_RULES.max_file_size) -> str:
    """
    Read a .roomodes file as UTF-8 with a size limit.

    Args:
        path: File to read
        max_size: Maximum file size in bytes

    Returns:
        File contents

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file exceeds the size limit
        UnicodeDecodeError: If the file is not UTF-8
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File does not exist: {path}")

    size = path.stat().st_size
    if size > max_size:
        raise ValueError(
            f"File too large: {path} ({size:,} bytes). "
            f"Maximum allowed: {max_size:,} bytes"
        )

    with open(path, 'r', encoding='utf-8-sig') as f:
        return f.read()


def json_type(value: Any) -> str:
    """Name of a parsed value's JSON type."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    return 'object'
