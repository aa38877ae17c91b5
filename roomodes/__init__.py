"""
Roomodes Guardian - validation and auto-repair for .roomodes files.

Checks custom mode definitions (slug, name, roleDefinition, groups and
their file-regex restrictions) and can write a corrected copy.
"""

from roomodes.core import (
    Diagnostic,
    Document,
    FixedDocument,
    ValidationResult,
    ValidationRules,
    fix,
    parse,
    validate_document,
    validate_text,
)

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    # Core classes
    "Diagnostic",
    "Document",
    "FixedDocument",
    "ValidationResult",
    "ValidationRules",
    # Pipeline
    "parse",
    "validate_document",
    "validate_text",
    "fix",
    # Version info
    "__version__",
    "__license__",
]
