"""
Report generation for validation runs.

Provides:
- Console transcript (terminal-friendly, colorized on a TTY)
- JSON report (machine-readable)
- Serialization of the fixed document
- Pass/fail decisions (whether to emit a fix, process exit code)
"""

import json
from typing import Any, Dict, List, Optional

from .base import Diagnostic, FixedDocument, ValidationResult
from .colors import bold, error, info, success, warning

EXIT_VALID = 0
EXIT_INVALID = 1

RULE = "=" * 42


def exit_code(result: ValidationResult) -> int:
    """
    Process exit code for a validation result.

    Depends only on the pre-fix document: 0 iff the container parsed and
    no errors were found, whether or not a fix was requested or written.
    """
    return EXIT_VALID if result.is_valid else EXIT_INVALID


def should_emit_fix(result: ValidationResult) -> bool:
    """
    Whether fix mode has anything to write.

    True when a fixable error exists, or when the only change is renaming
    the deprecated container key.
    """
    if result.structural_error is not None or result.document is None:
        return False
    if any(d.fixable for d in result.errors):
        return True
    return result.document.uses_alias


def serialize_document(fixed: FixedDocument) -> str:
    """Serialize a fixed document as 2-space indented JSON."""
    return json.dumps(fixed.data, indent=2, ensure_ascii=False) + "\n"


def _format_diagnostic(diagnostic: Diagnostic, indent: str = "  ") -> str:
    if diagnostic.is_error:
        return error(f"{indent}❌ ERROR: {diagnostic.message}")
    return warning(f"{indent}⚠️  WARNING: {diagnostic.message}")


def render_console(
    result: ValidationResult,
    fixed: Optional[FixedDocument] = None,
    verbose: bool = False
) -> str:
    """
    Render the validation transcript.

    Format:
        ==========================================
        Validating .roomodes file: {source}
        ==========================================

        Checking mode #1 (Name): PASS
          ⚠️  WARNING: ...

        ✅ .roomodes file is valid!

    Args:
        result: Validation result
        fixed: Fixed document, if one was built
        verbose: Also list passing checks summary per record

    Returns:
        Transcript as a single string
    """
    lines: List[str] = [
        RULE,
        f"Validating .roomodes file: {result.source}",
        RULE,
        "",
    ]

    if result.structural_error is not None:
        lines.append(error(f"❌ ERROR: {result.structural_error}"))
        lines.append("")
        lines.append(error(bold("❌ Validation failed: document structure is invalid")))
        return "\n".join(lines)

    lines.append(success("✅ JSON syntax is valid"))
    for diagnostic in result.structural:
        lines.append(_format_diagnostic(diagnostic, indent=""))

    if result.records:
        lines.append(success(f"✅ Found {len(result.records)} custom mode(s)"))
    lines.append("")

    for record in result.records:
        status = success("PASS") if record.is_valid else error("FAIL")
        lines.append(f"Checking mode #{record.index + 1} ({record.label}): {status}")
        for diagnostic in record.diagnostics:
            lines.append(_format_diagnostic(diagnostic))
        if verbose and not record.diagnostics:
            lines.append(success("  ✅ All fields and groups are valid"))
        lines.append("")

    error_count = len(result.errors)
    warning_count = len(result.warnings)

    if result.is_valid:
        summary = f"✅ .roomodes file is valid! ({len(result.records)} mode(s)"
        if warning_count:
            summary += f", {warning_count} warning(s)"
        lines.append(success(bold(summary + ")")))
    else:
        lines.append(error(bold(
            f"❌ Validation failed with {error_count} error(s) and {warning_count} warning(s)"
        )))

    if fixed is not None:
        lines.append("")
        lines.append(info("💡 Created fixed version of the file"))
        for note in fixed.notes:
            lines.append(f"    Auto-fix: {note}")

    return "\n".join(lines)


def generate_json_report(
    result: ValidationResult,
    fixed: Optional[FixedDocument] = None,
    output_path: Optional[str] = None
) -> Dict[str, Any]:
    """
    Generate JSON format report.

    Structure:
    {
        "source": str,
        "valid": bool,
        "exitCode": int,
        "structuralError": str | null,
        "summary": {"modes": int, "errors": int, "warnings": int},
        "structural": [diagnostic],
        "modes": [{"index": int, "label": str, "valid": bool, "diagnostics": [...]}],
        "fix": {"written": str | null, "notes": [str]} | null
    }

    Args:
        result: Validation result
        fixed: Fixed document, if one was built
        output_path: Where the fixed document was written, if anywhere

    Returns:
        Dict suitable for JSON serialization
    """
    return {
        "source": result.source,
        "valid": result.is_valid,
        "exitCode": exit_code(result),
        "structuralError": result.structural_error,
        "summary": {
            "modes": len(result.records),
            "errors": len(result.errors),
            "warnings": len(result.warnings),
        },
        "structural": [d.to_dict() for d in result.structural],
        "modes": [
            {
                "index": record.index,
                "label": record.label,
                "valid": record.is_valid,
                "diagnostics": [d.to_dict() for d in record.diagnostics],
            }
            for record in result.records
        ],
        "fix": None if fixed is None else {
            "written": output_path,
            "notes": list(fixed.notes),
        },
    }
