"""
Capability ("groups") validation.

Each raw entry is classified exactly once into a tagged shape; the checks
and fixes below then dispatch on the shape instead of re-inspecting types.
Fixes are computed alongside the checks so the fixer never has to guess.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from .base import (
    BareCapability,
    Category,
    GroupResult,
    RestrictedCapability,
    error,
    warning,
)
from .regex_validator import repair_pattern, validate_pattern
from .rules import ValidationRules

logger = logging.getLogger(__name__)

GROUPS_FIELD = 'groups'


@dataclass(frozen=True)
class BareEntry:
    """A plain string entry."""
    tag: str


@dataclass(frozen=True)
class RestrictedEntry:
    """A two-element ``[tag, restriction]`` entry, not yet checked."""
    tag: Any
    restriction: Any


@dataclass(frozen=True)
class MalformedEntry:
    """Anything else."""
    value: Any


Entry = Union[BareEntry, RestrictedEntry, MalformedEntry]


def classify_entry(entry: Any) -> Entry:
    """Classify a raw capability entry by shape."""
    if isinstance(entry, str):
        return BareEntry(entry)
    if isinstance(entry, list) and len(entry) == 2:
        return RestrictedEntry(entry[0], entry[1])
    return MalformedEntry(entry)


def default_capability(rules: ValidationRules) -> BareCapability:
    """The minimal read-only capability used whenever a list must not be empty."""
    return BareCapability(rules.fallback_group)


def validate_groups(
    groups: List[Any],
    rules: ValidationRules,
    record_index: Optional[int] = None
) -> GroupResult:
    """
    Validate a record's capability list.

    Args:
        groups: Raw ``groups`` array from the record
        rules: Rule tables (tag set, fallback values)
        record_index: Record position attached to every diagnostic

    Returns:
        GroupResult with diagnostics in discovery order and the fixed list.
        The fixed list is never empty.
    """
    result = GroupResult()

    for index, raw in enumerate(groups):
        entry = classify_entry(raw)

        if isinstance(entry, BareEntry):
            capability = _check_bare(entry, index, rules, record_index, result)
        elif isinstance(entry, RestrictedEntry):
            capability = _check_restricted(entry, index, rules, record_index, result)
        else:
            result.diagnostics.append(error(
                'group-shape',
                f"Invalid group format at index {index}. "
                f"Must be a string or an array with 2 elements",
                record_index, GROUPS_FIELD
            ))
            capability = None

        if capability is None:
            logger.debug(f"Dropping capability entry {index}", extra={'record_index': record_index})
        else:
            result.fixed_list.append(capability)

    if not result.fixed_list:
        result.fixed_list.append(default_capability(rules))

    return result


def _check_bare(entry: BareEntry, index: int, rules: ValidationRules,
                record_index: Optional[int], result: GroupResult):
    if rules.is_valid_group(entry.tag):
        return BareCapability(entry.tag)

    result.diagnostics.append(error(
        'group-unknown',
        f'Invalid tool group at index {index}: "{entry.tag}". '
        f'Valid groups are: {rules.describe_groups()}',
        record_index, GROUPS_FIELD
    ))
    return None


def _check_restricted(entry: RestrictedEntry, index: int, rules: ValidationRules,
                      record_index: Optional[int], result: GroupResult) -> RestrictedCapability:
    add = result.diagnostics.append

    tag = entry.tag
    if not rules.is_valid_group(tag):
        add(error(
            'group-unknown-tag',
            f'Invalid tool group at index {index}: "{tag}". '
            f'Valid groups are: {rules.describe_groups()}',
            record_index, GROUPS_FIELD
        ))
        tag = rules.fallback_group

    restriction = entry.restriction
    if not isinstance(restriction, dict):
        add(error(
            'restriction-shape',
            f'Group restriction at index {index} must be an object',
            record_index, GROUPS_FIELD
        ))
        return RestrictedCapability(tag, rules.match_all_pattern, rules.generic_note)

    pattern = _check_pattern(restriction.get('fileRegex'), index, rules, record_index, result)

    note = restriction.get('description')
    if not isinstance(note, str) or not note.strip():
        add(error(
            'restriction-note-missing',
            f'Missing required "description" in group restriction at index {index}',
            record_index, GROUPS_FIELD
        ))
        note = rules.generic_note

    return RestrictedCapability(tag, pattern, note)


def _check_pattern(pattern: Any, index: int, rules: ValidationRules,
                   record_index: Optional[int], result: GroupResult) -> str:
    add = result.diagnostics.append

    if pattern is None or pattern == '':
        add(error(
            'restriction-pattern-missing',
            f'Missing required "fileRegex" in group restriction at index {index}',
            record_index, GROUPS_FIELD
        ))
        return rules.match_all_pattern

    if not isinstance(pattern, str):
        add(error(
            'regex-invalid',
            f'"fileRegex" at index {index} must be a string, got {type(pattern).__name__}',
            record_index, GROUPS_FIELD, category=Category.REGEX
        ))
        return rules.match_all_pattern

    for issue in validate_pattern(pattern):
        if issue.issue_type == 'invalid_syntax':
            add(error(
                'regex-invalid',
                f'Invalid regex pattern at index {index}: "{pattern}" - {issue.description}',
                record_index, GROUPS_FIELD, category=Category.REGEX
            ))
        else:
            add(error(
                'regex-escaping',
                f'Regex pattern at index {index} has invalid escaping for JSON: "{pattern}"',
                record_index, GROUPS_FIELD, category=Category.REGEX
            ))
            add(warning(
                'regex-escaping-hint',
                'In JSON, backslashes must be doubled: write "\\\\." (not "\\.") for a literal period',
                record_index, GROUPS_FIELD, category=Category.REGEX
            ))

    return repair_pattern(pattern, rules.match_all_pattern)
