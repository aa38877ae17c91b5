"""
Constant tables for .roomodes validation.

All validators receive a ValidationRules instance explicitly instead of
reading module globals, so tests can swap in alternative tables.
"""

from dataclasses import dataclass, fields
from typing import Tuple

# =============================================================================
# DEFAULTS
# =============================================================================
VALID_TOOL_GROUPS = ('read', 'edit', 'browser', 'command', 'mcp')
FALLBACK_GROUP = 'read'             # Safest read-only capability
MATCH_ALL_PATTERN = '.*'
GENERIC_NOTE = 'All files'
LEAD_IN_PHRASE = 'You are Roo'
PLACEHOLDER_PREFIX = 'record'
CANONICAL_KEY = 'customModes'
ALIAS_KEY = 'modes'                 # Deprecated container key
MAX_FILE_SIZE = 10 * 1024 * 1024    # 10MB max .roomodes size

SLUG_CHARSET = 'a-z0-9-'


@dataclass(frozen=True)
class ValidationRules:
    """
    Immutable rule tables shared by every validator.

    Attributes:
        tool_groups: Enumerated capability tags, in display order
        fallback_group: Tag used when a restricted entry has an unknown tag
            and when a capability list would otherwise be empty
        match_all_pattern: Pattern substituted for missing or broken regexes
        generic_note: Description substituted for missing restriction notes
        lead_in_phrase: Phrase a roleDefinition is expected to contain
        placeholder_prefix: Prefix for synthesized slugs (``record-<n>``)
        canonical_key: Top-level key holding the records
        alias_key: Deprecated top-level key accepted for compatibility
        max_file_size: Largest input file accepted, in bytes
    """
    tool_groups: Tuple[str, ...] = VALID_TOOL_GROUPS
    fallback_group: str = FALLBACK_GROUP
    match_all_pattern: str = MATCH_ALL_PATTERN
    generic_note: str = GENERIC_NOTE
    lead_in_phrase: str = LEAD_IN_PHRASE
    placeholder_prefix: str = PLACEHOLDER_PREFIX
    canonical_key: str = CANONICAL_KEY
    alias_key: str = ALIAS_KEY
    max_file_size: int = MAX_FILE_SIZE

    def is_valid_group(self, tag) -> bool:
        """Check whether ``tag`` is one of the enumerated tool groups."""
        return isinstance(tag, str) and tag in self.tool_groups

    def describe_groups(self) -> str:
        """Comma-separated tool groups for error messages."""
        return ', '.join(self.tool_groups)

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


DEFAULT_RULES = ValidationRules()
