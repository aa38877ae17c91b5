"""
Test suite for capability (groups) validation and regex checks.

Covers:
1. Entry classification (bare, restricted, malformed)
2. Unknown tags, restriction fields, regex compilation
3. The JSON escaping invariant and its repair
4. The fixed list is never empty
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from roomodes.core.base import BareCapability, Category, RestrictedCapability
from roomodes.core.group_validator import (
    BareEntry,
    MalformedEntry,
    RestrictedEntry,
    classify_entry,
    validate_groups,
)
from roomodes.core.regex_validator import (
    double_backslashes,
    has_invalid_escaping,
    repair_pattern,
    validate_pattern,
)
from roomodes.core.rules import DEFAULT_RULES, ValidationRules


def codes(result):
    return [d.code for d in result.diagnostics]


class TestClassifyEntry:
    """Each raw entry maps to exactly one shape."""

    def test_string_is_bare(self):
        assert classify_entry("read") == BareEntry("read")

    def test_pair_is_restricted(self):
        entry = classify_entry(["edit", {"fileRegex": ".*"}])
        assert entry == RestrictedEntry("edit", {"fileRegex": ".*"})

    @pytest.mark.parametrize("raw", [42, None, {"read": True}, ["edit"], ["a", "b", "c"]])
    def test_other_shapes_are_malformed(self, raw):
        assert isinstance(classify_entry(raw), MalformedEntry)


class TestBareGroups:
    """Plain string capabilities."""

    def test_all_valid_groups(self):
        """Every enumerated tag passes untouched."""
        groups = ["read", "edit", "browser", "command", "mcp"]
        result = validate_groups(groups, DEFAULT_RULES)
        assert result.errors == []
        assert result.fixed_list == [BareCapability(g) for g in groups]

    def test_unknown_group_dropped(self):
        """Unknown tags are errors and disappear from the fixed list."""
        result = validate_groups(["read", "write"], DEFAULT_RULES, record_index=3)
        assert codes(result) == ["group-unknown"]
        assert result.errors[0].record_index == 3
        assert 'Invalid tool group at index 1: "write"' in result.errors[0].message
        assert result.fixed_list == [BareCapability("read")]

    def test_malformed_entry_dropped(self):
        """Non-string, non-pair entries are dropped."""
        result = validate_groups(["edit", 7], DEFAULT_RULES)
        assert codes(result) == ["group-shape"]
        assert "invalid group format" in result.errors[0].message.lower()
        assert result.fixed_list == [BareCapability("edit")]

    def test_custom_tag_set(self):
        """The tag set is taken from the rules passed in."""
        rules = ValidationRules(tool_groups=("read", "deploy"))
        assert validate_groups(["deploy"], rules).errors == []
        assert codes(validate_groups(["edit"], rules)) == ["group-unknown"]


class TestRestrictedGroups:
    """[tag, {fileRegex, description}] capabilities."""

    def test_valid_restriction(self):
        """A well-formed restriction passes untouched."""
        entry = ["edit", {"fileRegex": "\\\\.md$", "description": "Markdown files"}]
        result = validate_groups([entry], DEFAULT_RULES)
        assert result.diagnostics == []
        assert result.fixed_list == [RestrictedCapability("edit", "\\\\.md$", "Markdown files")]

    def test_unknown_tag_falls_back_to_read(self):
        """Unknown tag is an error; the fix keeps the restriction with tag read."""
        entry = ["write", {"fileRegex": ".*", "description": "All"}]
        result = validate_groups([entry], DEFAULT_RULES)
        assert codes(result) == ["group-unknown-tag"]
        assert result.fixed_list == [RestrictedCapability("read", ".*", "All")]

    def test_restriction_not_object(self):
        """A non-object restriction is replaced wholesale."""
        result = validate_groups([["edit", "docs"]], DEFAULT_RULES)
        assert codes(result) == ["restriction-shape"]
        assert result.fixed_list == [RestrictedCapability("edit", ".*", "All files")]

    def test_missing_pattern_and_note_are_separate_errors(self):
        """Each missing restriction field is its own error."""
        result = validate_groups([["edit", {}]], DEFAULT_RULES)
        assert codes(result) == ["restriction-pattern-missing", "restriction-note-missing"]
        assert result.fixed_list == [RestrictedCapability("edit", ".*", "All files")]

    def test_invalid_regex(self):
        """Non-compiling patterns become the match-all pattern."""
        entry = ["edit", {"fileRegex": "([a-z", "description": "Broken"}]
        result = validate_groups([entry], DEFAULT_RULES)
        assert codes(result) == ["regex-invalid"]
        assert result.errors[0].category is Category.REGEX
        assert result.fixed_list == [RestrictedCapability("edit", ".*", "Broken")]

    def test_non_string_regex(self):
        """A numeric fileRegex is a regex error."""
        result = validate_groups([["edit", {"fileRegex": 5, "description": "x"}]], DEFAULT_RULES)
        assert codes(result) == ["regex-invalid"]
        assert result.fixed_list[0].pattern == ".*"

    def test_single_backslash_flagged_with_hint(self):
        """A lone backslash escape is an error plus an explanatory warning."""
        entry = ["edit", {"fileRegex": "\\.md$", "description": "Markdown"}]
        result = validate_groups([entry], DEFAULT_RULES)
        assert codes(result) == ["regex-escaping", "regex-escaping-hint"]
        assert len(result.errors) == 1
        assert len(result.warnings) == 1
        assert "doubled" in result.warnings[0].message
        assert result.fixed_list == [RestrictedCapability("edit", "\\\\.md$", "Markdown")]

    def test_empty_list_gets_default(self):
        """If nothing survives, exactly one read capability is added."""
        result = validate_groups(["bogus", 3], DEFAULT_RULES)
        assert len(result.errors) == 2
        assert result.fixed_list == [BareCapability("read")]

    def test_empty_input_gets_default(self):
        """An empty list has no errors but the fixed list is still non-empty."""
        result = validate_groups([], DEFAULT_RULES)
        assert result.errors == []
        assert result.fixed_list == [BareCapability("read")]


class TestEscaping:
    """The serialization escaping invariant."""

    def test_single_backslash_flagged(self):
        assert has_invalid_escaping("\\.")

    def test_doubled_backslash_not_flagged(self):
        assert not has_invalid_escaping("\\\\.")

    def test_plain_pattern_not_flagged(self):
        assert not has_invalid_escaping("src/.*")

    def test_double_backslashes(self):
        assert double_backslashes("\\.md$") == "\\\\.md$"
        assert double_backslashes("a\\d+\\.ts") == "a\\\\d+\\\\.ts"

    def test_double_backslashes_leaves_doubled_alone(self):
        assert double_backslashes("\\\\.md$") == "\\\\.md$"

    def test_validate_pattern_reports_syntax_first(self):
        """Escaping is only checked on compiling patterns."""
        [issue] = validate_pattern("(\\.")
        assert issue.issue_type == "invalid_syntax"

    def test_repair_falls_back_when_doubling_breaks_pattern(self):
        """Doubling an escaped parenthesis unbalances the group."""
        assert repair_pattern("(\\))", ".*") == ".*"

    def test_repair_result_always_validates(self):
        for pattern in ["\\.md$", "([", "\\d+", "ok", "[\\]]"]:
            assert validate_pattern(repair_pattern(pattern, ".*")) == []
