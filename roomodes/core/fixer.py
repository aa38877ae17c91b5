"""
Auto-fixer: derive a corrected document from validation diagnostics.

The fixer never edits the parsed Document. Records without errors are deep
copied untouched (even when they carry warnings); records with errors are
rebuilt by replaying one substitution per diagnostic, in discovery order.

Slug substitutions run first because names are derived from slugs. Slugs of
records that need no slug fix are reserved up front, so rebuilt records
never steal an identifier from a record that was already correct.
"""

import copy
import json
import logging
import re
from typing import Any, Dict, List, Set

from .base import Document, FixedDocument, RecordResult, ValidationResult
from .group_validator import validate_groups
from .rules import DEFAULT_RULES, ValidationRules
from .schema_validator import is_valid_slug

logger = logging.getLogger(__name__)

SLUG_CODES = ('slug-missing', 'slug-charset', 'slug-duplicate')
GROUP_ENTRY_PREFIXES = ('group-', 'restriction-', 'regex-')


def slugify(value: str) -> str:
    """
    Coerce a string into the slug charset.

    Lowercases, replaces disallowed characters with ``-``, collapses runs of
    hyphens and trims them from both ends.
    """
    slug = value.lower()
    slug = re.sub(r'[^a-z0-9-]', '-', slug)
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-')


def name_from_slug(slug: str) -> str:
    """Title-case display name, e.g. ``code-reviewer`` → ``Code Reviewer``."""
    return ' '.join(part.capitalize() for part in slug.split('-') if part)


def fix(
    document: Document,
    result: ValidationResult,
    rules: ValidationRules = DEFAULT_RULES,
    smooth: bool = False
) -> FixedDocument:
    """
    Build a FixedDocument.

    Args:
        document: The parsed (pre-fix) document
        result: Validation result for ``document``
        rules: Rule tables supplying the substitution values
        smooth: Also apply warning-driven cosmetic fixes to records that are
            rebuilt anyway

    Returns:
        FixedDocument that re-validates with zero errors
    """
    notes: List[str] = []
    record_results = {r.index: r for r in result.records}

    taken: Set[str] = set()
    for index, raw in enumerate(document.records):
        record_result = record_results.get(index)
        if _slug_codes(record_result):
            continue
        slug = raw.get('slug') if isinstance(raw, dict) else None
        if is_valid_slug(slug):
            taken.add(slug)

    fixed_records = []
    for index, raw in enumerate(document.records):
        record_result = record_results.get(index)
        if record_result is None or record_result.is_valid:
            fixed_records.append(copy.deepcopy(raw))
        else:
            fixed_records.append(
                _rebuild_record(raw, record_result, taken, rules, smooth, notes)
            )

    data: Dict[str, Any] = {}
    for key, value in document.raw.items():
        if key == document.container_key:
            data[rules.canonical_key] = fixed_records
        else:
            data[key] = copy.deepcopy(value)

    if document.container_key != rules.canonical_key:
        notes.append(f'Renamed "{document.container_key}" to "{rules.canonical_key}"')

    logger.debug(f"Built fixed document with {len(notes)} fix(es)")

    return FixedDocument(data=data, container_key=rules.canonical_key, notes=tuple(notes))


def _slug_codes(record_result) -> List[str]:
    if record_result is None:
        return []
    return [d.code for d in record_result.errors if d.code in SLUG_CODES]


def _claim_slug(candidate: str, n: int, taken: Set[str]) -> str:
    """Reserve ``candidate``, suffixing ``-<n>`` (then ``-<n>-<k>``) until unused."""
    if candidate not in taken:
        taken.add(candidate)
        return candidate

    base = f'{candidate}-{n}'
    slug = base
    counter = 2
    while slug in taken:
        slug = f'{base}-{counter}'
        counter += 1
    taken.add(slug)
    return slug


def _stringify(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _rebuild_record(
    raw: Any,
    record_result: RecordResult,
    taken: Set[str],
    rules: ValidationRules,
    smooth: bool,
    notes: List[str]
) -> Dict[str, Any]:
    n = record_result.index + 1
    label = f'Mode #{n}'
    fixed: Dict[str, Any] = copy.deepcopy(raw) if isinstance(raw, dict) else {}

    errors = record_result.errors
    codes = [d.code for d in errors]

    if 'record-shape' in codes:
        notes.append(f'{label}: replaced invalid entry with a new mode definition')

    # Phase 1: slug
    slug_codes = [code for code in codes if code in SLUG_CODES]
    if slug_codes:
        slug = fixed.get('slug')
        for code in slug_codes:
            if code == 'slug-missing':
                slug = f'{rules.placeholder_prefix}-{n}'
            elif code == 'slug-charset':
                slug = slugify(str(slug)) or f'{rules.placeholder_prefix}-{n}'
            elif code == 'slug-duplicate':
                slug = f'{slug}-{n}'
        slug = _claim_slug(slug, n, taken)
        fixed['slug'] = slug
        notes.append(f'{label}: set slug to "{slug}"')

    # Phase 2: everything else, in discovery order
    groups_rebuilt = False
    for code in codes:
        if code in ('name-missing', 'name-invalid'):
            name = name_from_slug(fixed['slug']) or f'Mode {n}'
            fixed['name'] = name
            notes.append(f'{label}: added placeholder name "{name}"')

        elif code == 'role-missing':
            name = fixed['name']
            fixed['roleDefinition'] = f'{rules.lead_in_phrase}, a {name.lower()} assistant.'
            notes.append(f'{label}: added placeholder roleDefinition')

        elif code == 'role-type':
            fixed['roleDefinition'] = _stringify(fixed['roleDefinition'])
            notes.append(f'{label}: converted roleDefinition to string')

        elif code in ('groups-missing', 'groups-type'):
            fixed['groups'] = [rules.fallback_group]
            notes.append(f'{label}: set groups to default "{rules.fallback_group}" group')

        elif code.startswith(GROUP_ENTRY_PREFIXES) and not groups_rebuilt:
            group_result = validate_groups(fixed['groups'], rules, record_result.index)
            fixed['groups'] = [capability.to_json() for capability in group_result.fixed_list]
            groups_rebuilt = True
            notes.append(f'{label}: fixed invalid groups')

    if fixed.get('groups') == []:
        fixed['groups'] = [rules.fallback_group]
        notes.append(f'{label}: added default "{rules.fallback_group}" group')

    if smooth and any(d.code == 'role-lead-in' for d in record_result.warnings):
        role = fixed['roleDefinition']
        if not role.startswith(rules.lead_in_phrase):
            fixed['roleDefinition'] = f'{rules.lead_in_phrase}, {role[:1].lower()}{role[1:]}'
            notes.append(f'{label}: prepended "{rules.lead_in_phrase}" to roleDefinition')

    return fixed
