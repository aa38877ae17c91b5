"""
Document-level validation.

Runs the loader, then the schema and group validators over every record,
and aggregates the results. Structural failures are captured in the
result instead of propagating, so callers always get a full transcript.
"""

import logging

from .base import Document, StructuralError, ValidationResult
from .loader import parse
from .rules import DEFAULT_RULES, ValidationRules
from .schema_validator import validate_record

logger = logging.getLogger(__name__)


def validate_document(
    document: Document,
    rules: ValidationRules = DEFAULT_RULES,
    source: str = '<string>'
) -> ValidationResult:
    """
    Validate every record of a parsed document.

    Args:
        document: Parsed document
        rules: Rule tables
        source: Label for reports (usually the file path)

    Returns:
        ValidationResult with structural and per-record diagnostics
    """
    result = ValidationResult(
        document=document,
        structural=list(document.diagnostics),
        source=source
    )

    seen_slugs = set()
    for index, record in enumerate(document.records):
        record_result = validate_record(record, index, seen_slugs, rules)
        result.records.append(record_result)
        logger.debug(
            f"Record {record_result.label}: {len(record_result.errors)} error(s), "
            f"{len(record_result.warnings)} warning(s)",
            extra={'record_index': index}
        )

    return result


def validate_text(
    text: str,
    rules: ValidationRules = DEFAULT_RULES,
    source: str = '<string>'
) -> ValidationResult:
    """
    Parse and validate raw .roomodes text.

    A StructuralError (including ParseError) short-circuits all record
    checks and is reported through ``structural_error``.
    """
    try:
        document = parse(text, rules)
    except StructuralError as e:
        logger.debug(f"Structural error in {source}: {e}")
        return ValidationResult(document=None, structural_error=str(e), source=source)

    return validate_document(document, rules, source)
