"""
Test suite for rules file loading and validation.

Covers:
1. YAML, TOML and JSON rules files
2. Top-level and [rules] section overrides
3. Field type checks and cross-field consistency
4. List vs string handling
5. Unknown keys produce warnings, not errors
"""

import json
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from roomodes.core.config_validator import (
    ConfigError,
    ConfigValidationError,
    MAX_ARRAY_SIZE,
    ensure_list,
    load_rules,
    validate_and_load_rules,
    validate_rules_schema,
)
from roomodes.core.rules import DEFAULT_RULES, ValidationRules


class TestEnsureList:
    """List vs string handling."""

    def test_list_unchanged(self):
        assert ensure_list(["read", "edit"], "tool_groups") == ["read", "edit"]

    def test_string_coerced(self):
        assert ensure_list("read", "tool_groups") == ["read"]

    def test_string_rejected_when_strict(self):
        with pytest.raises(ConfigError) as exc_info:
            ensure_list("read", "tool_groups", coerce_string=False)
        assert "Expected a list" in str(exc_info.value)

    def test_none_is_empty(self):
        assert ensure_list(None, "tool_groups") == []

    def test_too_many_items(self):
        with pytest.raises(ConfigError):
            ensure_list(["g"] * (MAX_ARRAY_SIZE + 1), "tool_groups")

    def test_wrong_type(self):
        with pytest.raises(ConfigError) as exc_info:
            ensure_list(5, "tool_groups")
        assert "Expected list, got int" in str(exc_info.value)


class TestRulesSchema:
    """validate_rules_schema."""

    def test_empty_config_valid(self):
        result = validate_rules_schema({})
        assert result.is_valid
        assert result.overrides == {}

    def test_rules_section(self):
        result = validate_rules_schema({"rules": {"lead_in_phrase": "You are Kilo"}})
        assert result.is_valid
        assert result.overrides == {"lead_in_phrase": "You are Kilo"}

    def test_top_level_overrides(self):
        result = validate_rules_schema({"tool_groups": ["read", "deploy"]})
        assert result.overrides == {"tool_groups": ("read", "deploy")}

    def test_unknown_key_warns(self):
        result = validate_rules_schema({"colour": "blue"})
        assert result.is_valid
        assert any("colour" in w for w in result.warnings)

    def test_rules_section_not_mapping(self):
        result = validate_rules_schema({"rules": ["read"]})
        assert not result.is_valid

    def test_empty_tool_groups(self):
        result = validate_rules_schema({"tool_groups": []})
        assert not result.is_valid

    def test_duplicate_tool_groups(self):
        result = validate_rules_schema({"tool_groups": ["read", "read"]})
        assert any("duplicate" in e for e in result.errors)

    def test_non_string_field(self):
        result = validate_rules_schema({"generic_note": 3})
        assert not result.is_valid
        assert "[generic_note]" in result.errors[0]

    def test_fallback_must_be_a_group(self):
        result = validate_rules_schema({"tool_groups": ["edit"]})
        assert not result.is_valid
        assert any("fallback_group" in e for e in result.errors)

    def test_match_all_pattern_must_compile(self):
        result = validate_rules_schema({"match_all_pattern": "("})
        assert any("Invalid regex" in e for e in result.errors)

    def test_match_all_pattern_no_backslashes(self):
        result = validate_rules_schema({"match_all_pattern": "\\w*"})
        assert any("backslashes" in e for e in result.errors)

    def test_placeholder_prefix_must_be_slug(self):
        result = validate_rules_schema({"placeholder_prefix": "New Mode"})
        assert not result.is_valid

    def test_container_keys_must_differ(self):
        result = validate_rules_schema({"alias_key": "customModes"})
        assert not result.is_valid

    @pytest.mark.parametrize("value", [0, -1, True, "10MB"])
    def test_max_file_size(self, value):
        assert not validate_rules_schema({"max_file_size": value}).is_valid

    def test_all_errors_collected(self):
        """One pass reports every problem."""
        result = validate_rules_schema({"generic_note": 1, "lead_in_phrase": "", "max_file_size": 0})
        assert len(result.errors) == 3

    def test_raise_if_invalid(self):
        result = validate_rules_schema({"generic_note": 1})
        with pytest.raises(ConfigValidationError) as exc_info:
            result.raise_if_invalid()
        assert "1 error(s)" in str(exc_info.value)


class TestRulesFiles:
    """Loading from disk."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("rules:\n  tool_groups: [read, edit]\n  generic_note: Any file\n")
        rules, result = validate_and_load_rules(path)
        assert result.is_valid
        assert rules.tool_groups == ("read", "edit")
        assert rules.generic_note == "Any file"
        assert rules.fallback_group == DEFAULT_RULES.fallback_group

    def test_toml(self, tmp_path):
        path = tmp_path / "rules.toml"
        path.write_text('[rules]\nplaceholder_prefix = "mode"\nmax_file_size = 2048\n')
        rules, _ = validate_and_load_rules(path)
        assert rules.placeholder_prefix == "mode"
        assert rules.max_file_size == 2048

    def test_json(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"lead_in_phrase": "You are Kilo"}))
        rules, _ = validate_and_load_rules(path)
        assert rules == ValidationRules(lead_in_phrase="You are Kilo")

    def test_empty_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "rules.yml"
        path.write_text("")
        rules, result = validate_and_load_rules(path)
        assert result.is_valid
        assert rules == DEFAULT_RULES

    def test_parse_error_reported(self, tmp_path):
        path = tmp_path / "rules.toml"
        path.write_text("[rules\n")
        rules, result = validate_and_load_rules(path)
        assert not result.is_valid
        assert "TOML parse error" in result.errors[0]
        assert rules is DEFAULT_RULES

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("- read\n- edit\n")
        _, result = validate_and_load_rules(path)
        assert not result.is_valid

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "rules.ini"
        path.write_text("[rules]\n")
        with pytest.raises(ValueError) as exc_info:
            validate_and_load_rules(path)
        assert "Unsupported rules format" in str(exc_info.value)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "rules.yaml")

    def test_load_rules_none_is_default(self):
        assert load_rules(None) is DEFAULT_RULES

    def test_load_rules_raises_on_errors(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("fallback_group: nowhere\n")
        with pytest.raises(ConfigValidationError):
            load_rules(path)
