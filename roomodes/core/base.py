"""
Core data model for the roomodes validator.

Documents are parsed once and never modified. Validation produces
Diagnostics; fix mode builds a separate FixedDocument from scratch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class StructuralError(Exception):
    """
    The records container is missing or malformed.

    Fatal: per-record validation is skipped entirely.
    """


class ParseError(StructuralError):
    """The input text is not well-formed JSON."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class Severity(str, Enum):
    ERROR = 'error'
    WARNING = 'warning'


class Category(str, Enum):
    """Where a diagnostic originates."""
    STRUCTURAL = 'structural'
    FIELD = 'field'
    REGEX = 'regex'


@dataclass(frozen=True)
class Diagnostic:
    """
    A single issue found during validation.

    Attributes:
        severity: error or warning
        message: Human-readable description
        record_index: 0-based record position, None for structural issues
        fixable: Whether fix mode has a substitution for it
        code: Stable machine identifier (e.g. ``slug-charset``)
        field: Record field concerned, if any
        category: structural, field or regex
    """
    severity: Severity
    message: str
    record_index: Optional[int]
    fixable: bool
    code: str
    field: Optional[str] = None
    category: Category = Category.FIELD

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            'severity': self.severity.value,
            'message': self.message,
            'recordIndex': self.record_index,
            'fixable': self.fixable,
            'code': self.code,
            'field': self.field,
            'category': self.category.value,
        }


def error(code: str, message: str, record_index: Optional[int], field: Optional[str] = None,
          fixable: bool = True, category: Category = Category.FIELD) -> Diagnostic:
    """Shorthand for an error diagnostic."""
    return Diagnostic(Severity.ERROR, message, record_index, fixable, code, field, category)


def warning(code: str, message: str, record_index: Optional[int], field: Optional[str] = None,
            fixable: bool = False, category: Category = Category.FIELD) -> Diagnostic:
    """Shorthand for a warning diagnostic."""
    return Diagnostic(Severity.WARNING, message, record_index, fixable, code, field, category)


# =============================================================================
# Capabilities
# =============================================================================

@dataclass(frozen=True)
class BareCapability:
    """Unrestricted capability, serialized as ``"tag"``."""
    tag: str

    def to_json(self) -> Any:
        return self.tag


@dataclass(frozen=True)
class RestrictedCapability:
    """Capability limited to files matching ``pattern``."""
    tag: str
    pattern: str
    note: str

    def to_json(self) -> Any:
        return [self.tag, {'fileRegex': self.pattern, 'description': self.note}]


Capability = Union[BareCapability, RestrictedCapability]


# =============================================================================
# Documents
# =============================================================================

@dataclass(frozen=True)
class Document:
    """
    A parsed .roomodes document.

    Frozen at the attribute level only: ``raw`` and the records are the
    parsed JSON values themselves, not copies. Nothing in the pipeline
    mutates them; the fixer deep copies before changing anything.

    Attributes:
        raw: Top-level mapping as parsed
        container_key: Key the records were read from
        records: Raw record values, in file order
        diagnostics: Structural diagnostics found while loading
    """
    raw: Dict[str, Any]
    container_key: str
    records: Tuple[Any, ...]
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def uses_alias(self) -> bool:
        return any(d.code == 'container-alias' for d in self.diagnostics)


@dataclass(frozen=True)
class FixedDocument:
    """
    Corrected document built in fix mode.

    ``data`` is a fresh structure; it shares no mutable values with the
    Document it was derived from.
    """
    data: Dict[str, Any]
    container_key: str
    notes: Tuple[str, ...] = ()

    @property
    def records(self) -> List[Any]:
        return self.data.get(self.container_key, [])


# =============================================================================
# Results
# =============================================================================

@dataclass
class GroupResult:
    """Outcome of validating one record's capability list."""
    diagnostics: List[Diagnostic] = field(default_factory=list)
    fixed_list: List[Capability] = field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]


@dataclass
class RecordResult:
    """
    Validation outcome for a single record.

    Attributes:
        index: 0-based position in the container
        label: Name shown in reports (name, slug or ``#n``)
        diagnostics: Every issue, in the order the checks ran
    """
    index: int
    label: str
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def is_valid(self) -> bool:
        """Warnings never affect validity."""
        return not self.errors


@dataclass
class ValidationResult:
    """
    Aggregated outcome for a whole document.

    ``structural_error`` is set when the document could not be loaded; in
    that case ``document`` is None and ``records`` is empty.
    """
    document: Optional[Document]
    records: List[RecordResult] = field(default_factory=list)
    structural: List[Diagnostic] = field(default_factory=list)
    structural_error: Optional[str] = None
    source: str = '<string>'

    @property
    def diagnostics(self) -> List[Diagnostic]:
        """Structural diagnostics first, then records in order."""
        found = list(self.structural)
        for record in self.records:
            found.extend(record.diagnostics)
        return found

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def is_valid(self) -> bool:
        return self.structural_error is None and not self.errors

    def __bool__(self) -> bool:
        return self.is_valid
