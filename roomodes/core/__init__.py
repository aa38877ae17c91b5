"""
Roomodes Core - validation and auto-fix engine for .roomodes files.

Pipeline: loader → schema validator → group validator → fixer → reporting.
Constant tables live in ``rules`` and are passed explicitly to each stage.
"""

from .base import (
    BareCapability,
    Capability,
    Category,
    Diagnostic,
    Document,
    FixedDocument,
    GroupResult,
    ParseError,
    RecordResult,
    RestrictedCapability,
    Severity,
    StructuralError,
    ValidationResult,
)
from .rules import DEFAULT_RULES, ValidationRules
from .loader import parse, read_document_text
from .regex_validator import (
    double_backslashes,
    has_invalid_escaping,
    repair_pattern,
    validate_pattern,
)
from .group_validator import classify_entry, validate_groups
from .schema_validator import validate_record
from .validation import validate_document, validate_text
from .fixer import fix, slugify
from .reporting import (
    exit_code,
    generate_json_report,
    render_console,
    serialize_document,
    should_emit_fix,
)
from .config_validator import (
    ConfigError,
    ConfigValidationError,
    load_rules,
    validate_and_load_rules,
)

__all__ = [
    # Data model
    'BareCapability',
    'Capability',
    'Category',
    'Diagnostic',
    'Document',
    'FixedDocument',
    'GroupResult',
    'ParseError',
    'RecordResult',
    'RestrictedCapability',
    'Severity',
    'StructuralError',
    'ValidationResult',

    # Rules
    'DEFAULT_RULES',
    'ValidationRules',

    # Loader
    'parse',
    'read_document_text',

    # Regex
    'double_backslashes',
    'has_invalid_escaping',
    'repair_pattern',
    'validate_pattern',

    # Validators
    'classify_entry',
    'validate_groups',
    'validate_record',
    'validate_document',
    'validate_text',

    # Fixer
    'fix',
    'slugify',

    # Reporting
    'exit_code',
    'generate_json_report',
    'render_console',
    'serialize_document',
    'should_emit_fix',

    # Rules files
    'ConfigError',
    'ConfigValidationError',
    'load_rules',
    'validate_and_load_rules',
]
