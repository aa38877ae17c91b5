"""
Rules file loading and validation.

A rules file overrides the constant tables in ValidationRules. It may be
YAML, TOML or JSON; the overrides live at the top level or under a
``rules`` section:

    # roomodes-rules.toml
    [rules]
    tool_groups = ["read", "edit", "browser", "command", "mcp"]
    fallback_group = "read"
    lead_in_phrase = "You are Roo"

Every problem is collected before anything is raised, so one run reports
all mistakes in the file.

Usage:
    rules, result = validate_and_load_rules(path)
    result.raise_if_invalid().log_warnings()
"""

import json
import logging
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .rules import DEFAULT_RULES, SLUG_CHARSET, ValidationRules

logger = logging.getLogger(__name__)

MAX_RULES_FILE_SIZE = 1024 * 1024   # 1MB
MAX_ARRAY_SIZE = 100                # Max tool groups

STRING_FIELDS = (
    'fallback_group',
    'match_all_pattern',
    'generic_note',
    'lead_in_phrase',
    'placeholder_prefix',
    'canonical_key',
    'alias_key',
)


class ConfigError(Exception):
    """Rules file error with context."""

    def __init__(self, key: str, message: str, value: Any = None, suggestion: str = None):
        self.key = key
        self.value = value
        self.suggestion = suggestion
        full_message = f"Config error at '{key}': {message}"
        if value is not None:
            full_message += f" (got: {value!r})"
        if suggestion:
            full_message += f". Suggestion: {suggestion}"
        super().__init__(full_message)


class ConfigValidationError(Exception):
    """Raised when a rules file fails validation with one or more errors."""

    def __init__(self, errors: List[str], warnings: List[str] = None):
        self.errors = errors
        self.warnings = warnings or []
        message = f"Rules validation failed with {len(errors)} error(s):\n"
        message += "\n".join(f"  - {err}" for err in errors[:20])
        if len(errors) > 20:
            message += f"\n  ... and {len(errors) - 20} more errors"
        super().__init__(message)


@dataclass
class RulesValidationResult:
    """Result of rules file validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    overrides: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.is_valid

    def raise_if_invalid(self) -> 'RulesValidationResult':
        """Raise ConfigValidationError if validation failed."""
        if not self.is_valid:
            raise ConfigValidationError(self.errors, self.warnings)
        return self

    def log_warnings(self) -> 'RulesValidationResult':
        for message in self.warnings:
            logger.warning(f"Rules warning: {message}")
        return self


def ensure_list(value: Any, key_name: str, coerce_string: bool = True) -> List[Any]:
    """
    Ensure value is a list, optionally converting string to single-item list.

    A bare string where a list is expected would otherwise be iterated
    character by character.

    Args:
        value: Value to convert
        key_name: Config key name for error messages
        coerce_string: If True, convert single string to [string]. If False, raise error.

    Returns:
        List value

    Raises:
        ConfigError: If value cannot be converted to list
    """
    if value is None:
        return []

    if isinstance(value, str):
        if coerce_string:
            logger.warning(
                f"Config '{key_name}': Expected list but got string '{value}'. "
                f"Converting to single-item list."
            )
            return [value]
        raise ConfigError(
            key_name,
            "Expected a list, got a string",
            value,
            f"Use [\"{value}\"] for a single-item list"
        )

    if isinstance(value, list):
        if len(value) > MAX_ARRAY_SIZE:
            raise ConfigError(
                key_name,
                f"List has {len(value)} items, exceeds limit of {MAX_ARRAY_SIZE}",
                f"[{len(value)} items]"
            )
        return value

    raise ConfigError(
        key_name,
        f"Expected list, got {type(value).__name__}",
        value,
        "Use list syntax: [item1, item2]"
    )


def validate_rules_schema(config: Dict[str, Any]) -> RulesValidationResult:
    """
    Validate rule overrides.

    Args:
        config: Parsed rules file

    Returns:
        RulesValidationResult; ``overrides`` holds the accepted values
    """
    errors: List[str] = []
    warnings: List[str] = []
    overrides: Dict[str, Any] = {}

    def add_error(key: str, msg: str, suggestion: str = None):
        text = f"[{key}] {msg}"
        if suggestion:
            text += f" (Suggestion: {suggestion})"
        errors.append(text)

    section = config.get('rules', config)
    if not isinstance(section, dict):
        add_error('rules', f'Must be a section/dict, got {type(section).__name__}',
                  'Use [rules] in TOML or a rules: mapping in YAML')
        return RulesValidationResult(is_valid=False, errors=errors)

    known = set(ValidationRules.field_names())
    for key in section:
        if key not in known and key != 'rules':
            warnings.append(f"[{key}] Unknown rule, ignored")

    # tool_groups
    if 'tool_groups' in section:
        try:
            groups = ensure_list(section['tool_groups'], 'tool_groups')
        except ConfigError as e:
            add_error('tool_groups', str(e))
        else:
            if not groups:
                add_error('tool_groups', 'Must list at least one group')
            elif not all(isinstance(g, str) and g for g in groups):
                add_error('tool_groups', 'Every group must be a non-empty string')
            elif len(set(groups)) != len(groups):
                add_error('tool_groups', 'Contains duplicate groups')
            else:
                overrides['tool_groups'] = tuple(groups)

    for key in STRING_FIELDS:
        if key not in section:
            continue
        value = section[key]
        if not isinstance(value, str) or not value.strip():
            add_error(key, f'Must be a non-empty string, got {type(value).__name__}')
        else:
            overrides[key] = value

    if 'max_file_size' in section:
        value = section['max_file_size']
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            add_error('max_file_size', 'Must be a positive integer (bytes)',
                      'Use max_file_size = 10485760')
        else:
            overrides['max_file_size'] = value

    # Cross-field checks against the effective values
    groups = overrides.get('tool_groups', DEFAULT_RULES.tool_groups)
    fallback = overrides.get('fallback_group', DEFAULT_RULES.fallback_group)
    if fallback not in groups:
        add_error('fallback_group', f"'{fallback}' is not one of the tool groups",
                  f'Use one of: {", ".join(groups)}')

    pattern = overrides.get('match_all_pattern')
    if pattern is not None:
        try:
            re.compile(pattern)
        except re.error as e:
            add_error('match_all_pattern', f'Invalid regex: {e}')
        else:
            if '\\' in pattern:
                add_error('match_all_pattern', 'Must not contain backslashes')

    prefix = overrides.get('placeholder_prefix')
    if prefix is not None and not re.fullmatch(f'[{SLUG_CHARSET}]+', prefix):
        add_error('placeholder_prefix', f"'{prefix}' is not a valid slug",
                  'Use lowercase letters, numbers, and hyphens')

    canonical = overrides.get('canonical_key', DEFAULT_RULES.canonical_key)
    alias = overrides.get('alias_key', DEFAULT_RULES.alias_key)
    if canonical == alias:
        add_error('alias_key', 'Must differ from canonical_key')

    return RulesValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        overrides=overrides if not errors else {}
    )


def load_config_file(config_path: Path) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Parse a YAML, TOML or JSON rules file.

    Returns:
        (config, parse_error); exactly one is None

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is too large or the format is unsupported
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Rules file not found: {config_path}")

    file_size = config_path.stat().st_size
    if file_size > MAX_RULES_FILE_SIZE:
        raise ValueError(
            f"Rules file too large: {config_path} ({file_size:,} bytes). "
            f"Maximum is {MAX_RULES_FILE_SIZE:,} bytes."
        )

    suffix = config_path.suffix.lower()

    if suffix in ['.yaml', '.yml']:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            return None, f"YAML parse error: {e}"

    elif suffix == '.toml':
        try:
            with open(config_path, 'rb') as f:
                config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            return None, f"TOML parse error: {e}"

    elif suffix == '.json':
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            return None, f"JSON parse error at line {e.lineno}: {e.msg}"

    else:
        raise ValueError(
            f"Unsupported rules format: {suffix}. "
            f"Use .yaml, .yml, .toml, or .json"
        )

    if config is None:
        config = {}
    return config, None


def validate_and_load_rules(config_path: Path) -> Tuple[ValidationRules, RulesValidationResult]:
    """
    Load and validate a rules file.

    Args:
        config_path: Path to rules file (YAML, TOML, or JSON)

    Returns:
        (rules, validation_result). ``rules`` is DEFAULT_RULES when
        validation failed.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the format is unsupported or the file is too large
    """
    config_path = Path(config_path)
    config, parse_error = load_config_file(config_path)

    if parse_error:
        return DEFAULT_RULES, RulesValidationResult(
            is_valid=False,
            errors=[f"[rules_file] {parse_error}"]
        )

    if not isinstance(config, dict):
        return DEFAULT_RULES, RulesValidationResult(
            is_valid=False,
            errors=["[rules] Rules file must be a mapping, got " + type(config).__name__]
        )

    result = validate_rules_schema(config)
    if not result.is_valid:
        return DEFAULT_RULES, result

    return ValidationRules(**result.overrides), result


def load_rules(config_path: Optional[Path]) -> ValidationRules:
    """
    Load rules, raising immediately if the file is invalid.

    Args:
        config_path: Rules file, or None for the defaults

    Returns:
        ValidationRules

    Raises:
        ConfigValidationError: If any validation errors occur
        FileNotFoundError: If the rules file doesn't exist
        ValueError: If the format is unsupported
    """
    if config_path is None:
        return DEFAULT_RULES

    rules, result = validate_and_load_rules(config_path)
    result.raise_if_invalid().log_warnings()
    return rules
