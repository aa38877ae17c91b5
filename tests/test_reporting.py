"""
Test suite for reports and pass/fail decisions.

Covers:
1. Exit code and fix emission rules
2. Console transcript layout
3. JSON report structure
4. Fixed document serialization
"""

import json
import re
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from roomodes.core.fixer import fix
from roomodes.core.reporting import (
    EXIT_INVALID,
    EXIT_VALID,
    exit_code,
    generate_json_report,
    render_console,
    serialize_document,
    should_emit_fix,
)
from roomodes.core.validation import validate_text


GOOD = '{"slug":"a","name":"Alpha","roleDefinition":"You are Roo, alpha.","groups":["read"]}'


def doc(*records, key="customModes"):
    return '{"%s":[%s]}' % (key, ",".join(records))


def strip_colors(text):
    return re.sub(r"\033\[[0-9;]*m", "", text)


class TestDecisions:
    """Exit code and whether a fix is written."""

    def test_valid(self):
        result = validate_text(doc(GOOD))
        assert exit_code(result) == EXIT_VALID
        assert not should_emit_fix(result)

    def test_warnings_only(self):
        """Warnings neither fail the run nor trigger a fix."""
        result = validate_text(doc(GOOD.replace("You are Roo, alpha.", "Alpha.")))
        assert exit_code(result) == EXIT_VALID
        assert not should_emit_fix(result)

    def test_errors(self):
        result = validate_text(doc('{"slug":"a"}'))
        assert exit_code(result) == EXIT_INVALID
        assert should_emit_fix(result)

    def test_alias_only(self):
        result = validate_text(doc(GOOD, key="modes"))
        assert exit_code(result) == EXIT_VALID
        assert should_emit_fix(result)

    def test_structural_error(self):
        result = validate_text("{")
        assert exit_code(result) == EXIT_INVALID
        assert not should_emit_fix(result)

    def test_empty_container(self):
        result = validate_text(doc())
        assert exit_code(result) == EXIT_VALID
        assert not should_emit_fix(result)


class TestConsole:
    """render_console transcript."""

    def test_valid_transcript(self):
        text = strip_colors(render_console(validate_text(doc(GOOD), source=".roomodes")))
        lines = text.splitlines()
        assert lines[0] == "=" * 42
        assert lines[1] == "Validating .roomodes file: .roomodes"
        assert "✅ JSON syntax is valid" in text
        assert "✅ Found 1 custom mode(s)" in text
        assert "Checking mode #1 (Alpha): PASS" in text
        assert lines[-1] == "✅ .roomodes file is valid! (1 mode(s))"

    def test_warning_count_in_summary(self):
        result = validate_text(doc(GOOD.replace("You are Roo, alpha.", "Alpha.")))
        text = strip_colors(render_console(result))
        assert '  ⚠️  WARNING: roleDefinition should typically start with "You are Roo"' in text
        assert text.endswith("(1 mode(s), 1 warning(s))")

    def test_failure_transcript(self):
        result = validate_text(doc(GOOD, '{"slug":"a","name":"Dup","roleDefinition":"You are Roo.","groups":["x"]}'))
        text = strip_colors(render_console(result))
        assert "Checking mode #2 (Dup): FAIL" in text
        assert '  ❌ ERROR: Duplicate slug: "a"' in text
        assert "❌ Validation failed with 2 error(s) and 0 warning(s)" in text

    def test_structural_transcript(self):
        text = strip_colors(render_console(validate_text('{"customModes": 1}')))
        assert "❌ ERROR: " in text
        assert text.endswith("❌ Validation failed: document structure is invalid")
        assert "Checking mode" not in text

    def test_alias_reported(self):
        text = strip_colors(render_console(validate_text(doc(GOOD, key="modes"))))
        assert '⚠️  WARNING: ' in text
        assert '"modes"' in text

    def test_fix_notes_listed(self):
        result = validate_text(doc('{"slug":"Bad","name":"B","roleDefinition":"You are Roo.","groups":["read"]}'))
        fixed = fix(result.document, result)
        text = strip_colors(render_console(result, fixed))
        assert "💡 Created fixed version of the file" in text
        assert '    Auto-fix: Mode #1: set slug to "bad"' in text

    def test_verbose_marks_clean_records(self):
        text = strip_colors(render_console(validate_text(doc(GOOD)), verbose=True))
        assert "  ✅ All fields and groups are valid" in text


class TestJsonReport:
    """generate_json_report."""

    def test_structure(self):
        result = validate_text(doc(GOOD, '{"slug":"b"}'), source="x/.roomodes")
        report = generate_json_report(result)
        assert report["source"] == "x/.roomodes"
        assert report["valid"] is False
        assert report["exitCode"] == 1
        assert report["structuralError"] is None
        assert report["summary"] == {"modes": 2, "errors": 3, "warnings": 0}
        assert report["modes"][0] == {"index": 0, "label": "Alpha", "valid": True, "diagnostics": []}
        assert report["fix"] is None

    def test_diagnostic_fields(self):
        result = validate_text(doc('{"slug":"b","name":"B","roleDefinition":"You are Roo.","groups":"read"}'))
        [diagnostic] = generate_json_report(result)["modes"][0]["diagnostics"]
        assert diagnostic == {
            "severity": "error",
            "message": '"groups" must be an array',
            "recordIndex": 0,
            "fixable": True,
            "code": "groups-type",
            "field": "groups",
            "category": "field",
        }

    def test_serializable(self):
        result = validate_text("{")
        report = generate_json_report(result)
        assert json.loads(json.dumps(report))["structuralError"].startswith("Invalid JSON syntax")


class TestSerialize:
    """serialize_document."""

    def test_two_space_indent_and_newline(self):
        result = validate_text(doc(GOOD, key="modes"))
        text = serialize_document(fix(result.document, result))
        assert text.endswith("}\n")
        assert json.loads(text) == json.loads(doc(GOOD))
        assert '\n  "customModes": [' in text

    def test_non_ascii_kept(self):
        record = GOOD.replace("Alpha", "Ålpha")
        result = validate_text(doc(record, key="modes"))
        assert "Ålpha" in serialize_document(fix(result.document, result))
