"""
Per-record field validation for mode definitions.

Every check runs on every record, in a fixed order, and appends at most one
diagnostic. Nothing aborts early, so one pass reports every defect.

Check order:
    record shape → slug (missing, charset, duplicate) → name →
    roleDefinition (missing/type, lead-in phrase) → groups
"""

import re
from typing import Any, Callable, Dict, Set

from .base import Diagnostic, RecordResult, error, warning
from .group_validator import validate_groups
from .loader import json_type
from .rules import SLUG_CHARSET, ValidationRules

SLUG_PATTERN = re.compile(f'[{SLUG_CHARSET}]+')

Add = Callable[[Diagnostic], None]


def validate_record(
    record: Any,
    index: int,
    seen_slugs: Set[str],
    rules: ValidationRules
) -> RecordResult:
    """
    Validate one mode definition.

    Args:
        record: Raw record value from the container
        index: 0-based record position
        seen_slugs: Slugs of earlier records; updated in place
        rules: Rule tables

    Returns:
        RecordResult with diagnostics in check order
    """
    result = RecordResult(index=index, label=record_label(record, index))
    add = result.diagnostics.append

    if not isinstance(record, dict):
        add(error(
            'record-shape',
            f'Mode definition must be an object, got {json_type(record)}',
            index
        ))
        record = {}

    _check_slug(record, index, seen_slugs, add)
    _check_name(record, index, add)
    _check_role_definition(record, index, rules, add)
    _check_groups(record, index, rules, add)

    return result


def record_label(record: Any, index: int) -> str:
    """Name shown for a record in reports."""
    if isinstance(record, dict):
        for key in ('name', 'slug'):
            value = record.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return f'#{index + 1}'


def is_valid_slug(slug: Any) -> bool:
    return isinstance(slug, str) and SLUG_PATTERN.fullmatch(slug) is not None


def _check_slug(record: Dict[str, Any], index: int, seen_slugs: Set[str], add: Add):
    slug = record.get('slug')

    if slug is None or slug == '':
        add(error('slug-missing', 'Missing required "slug" field', index, 'slug'))
        return

    if not is_valid_slug(slug):
        add(error(
            'slug-charset',
            f'Invalid slug format: "{slug}". '
            f'Slug must only contain lowercase letters, numbers, and hyphens',
            index, 'slug'
        ))

    if not isinstance(slug, str):
        return

    if slug in seen_slugs:
        add(error(
            'slug-duplicate',
            f'Duplicate slug: "{slug}". Slug must be unique across all modes',
            index, 'slug'
        ))
    else:
        seen_slugs.add(slug)


def _check_name(record: Dict[str, Any], index: int, add: Add):
    name = record.get('name')

    if name is None or name == '':
        add(error('name-missing', 'Missing required "name" field', index, 'name'))
    elif not isinstance(name, str) or not name.strip():
        add(error('name-invalid', '"name" must be a non-empty string', index, 'name'))


def _check_role_definition(record: Dict[str, Any], index: int, rules: ValidationRules, add: Add):
    role = record.get('roleDefinition')

    if role is None or (isinstance(role, str) and not role.strip()):
        add(error('role-missing', 'Missing required "roleDefinition" field', index, 'roleDefinition'))
    elif not isinstance(role, str):
        add(error('role-type', '"roleDefinition" must be a string', index, 'roleDefinition'))
    elif rules.lead_in_phrase not in role:
        add(warning(
            'role-lead-in',
            f'roleDefinition should typically start with "{rules.lead_in_phrase}"',
            index, 'roleDefinition'
        ))


def _check_groups(record: Dict[str, Any], index: int, rules: ValidationRules, add: Add):
    groups = record.get('groups')

    if groups is None:
        add(error('groups-missing', 'Missing required "groups" field', index, 'groups'))
    elif not isinstance(groups, list):
        add(error('groups-type', '"groups" must be an array', index, 'groups'))
    else:
        for diagnostic in validate_groups(groups, rules, record_index=index).diagnostics:
            add(diagnostic)
