#!/usr/bin/env python3
"""
.roomodes validator command line.

Validates a .roomodes file, prints a transcript of every issue and, with
--fix, writes a corrected copy next to it.

Usage:
    roomodes-validate
    roomodes-validate ./my-project/.roomodes
    roomodes-validate --fix
    roomodes-validate --fix --output ./fixed.roomodes
    roomodes-validate --config roomodes-rules.toml --format json

Exit codes:
    0 - the input (before any fixing) has no errors
    1 - the input has errors, could not be read, or the fix could not be written
    2 - invalid command line arguments
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from roomodes.core.atomic_write import AtomicWriteError, atomic_write
from roomodes.core.base import FixedDocument, ValidationResult
from roomodes.core.colors import error, success
from roomodes.core.config_validator import ConfigValidationError, load_rules
from roomodes.core.fixer import fix
from roomodes.core.loader import read_document_text
from roomodes.core.logger import LogContext, setup_logger
from roomodes.core.reporting import (
    EXIT_INVALID,
    exit_code,
    generate_json_report,
    render_console,
    serialize_document,
    should_emit_fix,
)
from roomodes.core.rules import DEFAULT_RULES, ValidationRules
from roomodes.core.validation import validate_text

logger = logging.getLogger(__name__)

DEFAULT_INPUT = Path('./.roomodes')
FIXED_FILENAME = '.roomodes-fixed'


@dataclass
class RunOutcome:
    """Everything a single validation run produced."""
    result: ValidationResult
    fixed: Optional[FixedDocument] = None
    written_to: Optional[Path] = None
    write_error: Optional[str] = None

    @property
    def exit_code(self) -> int:
        if self.write_error is not None:
            return EXIT_INVALID
        return exit_code(self.result)


def default_output_path(input_path: Path) -> Path:
    """``<input-dir>/.roomodes-fixed``"""
    return Path(input_path).parent / FIXED_FILENAME


class ModesValidator:
    """
    Runs the validation pipeline for one file.

    Loader → schema validator → group validator → (fix mode) fixer.
    Reads the input once and, in fix mode, writes at most one output file.
    """

    def __init__(
        self,
        rules: ValidationRules = DEFAULT_RULES,
        fix_mode: bool = False,
        smooth: bool = False
    ):
        """
        Args:
            rules: Rule tables
            fix_mode: Build and write a fixed document when anything is fixable
            smooth: Apply optional cosmetic fixes to records being rebuilt
        """
        self.rules = rules
        self.fix_mode = fix_mode
        self.smooth = smooth

    def validate_file(self, path: Path) -> ValidationResult:
        """Read and validate ``path``; read failures become structural errors."""
        source = str(path)
        try:
            text = read_document_text(path, self.rules.max_file_size)
        except FileNotFoundError as e:
            logger.debug(str(e), extra={'file_path': source, 'error_code': 'IO-01'})
            return ValidationResult(document=None, structural_error=str(e), source=source)
        except (OSError, ValueError) as e:
            message = f"Could not read file: {e}"
            logger.debug(message, extra={'file_path': source, 'error_code': 'IO-02'})
            return ValidationResult(document=None, structural_error=message, source=source)

        result = validate_text(text, self.rules, source)
        if result.structural_error is not None:
            code = 'DOC-01' if result.structural_error.startswith('Invalid JSON') else 'DOC-02'
            logger.debug(result.structural_error, extra={'file_path': source, 'error_code': code})
        return result

    def run(self, path: Path, output_path: Optional[Path] = None) -> RunOutcome:
        """
        Validate ``path`` and, in fix mode, write the fixed document.

        Args:
            path: Input .roomodes file
            output_path: Fixed document destination (default: next to input)

        Returns:
            RunOutcome
        """
        outcome = RunOutcome(result=self.validate_file(path))

        if not self.fix_mode or not should_emit_fix(outcome.result):
            return outcome

        outcome.fixed = fix(outcome.result.document, outcome.result, self.rules, smooth=self.smooth)
        target = output_path or default_output_path(path)

        try:
            atomic_write(target, serialize_document(outcome.fixed))
        except AtomicWriteError as e:
            outcome.write_error = str(e)
            logger.debug(str(e), extra={'file_path': str(target), 'error_code': 'IO-03'})
        else:
            outcome.written_to = target
            logger.info(f"Fixed version written to {target}", extra={'file_path': str(target)})

        return outcome


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='roomodes-validate',
        description="Validates and fixes .roomodes files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s ./my-project/.roomodes
  %(prog)s --fix
  %(prog)s --fix --output ./fixed.roomodes
        """
    )

    parser.add_argument(
        'path',
        nargs='?',
        type=Path,
        default=DEFAULT_INPUT,
        help='Path to .roomodes file (default: ./.roomodes)'
    )

    parser.add_argument(
        '--fix', '-f',
        action='store_true',
        help='Generate a fixed version of the file if possible'
    )

    parser.add_argument(
        '--output', '-o',
        type=Path,
        help=f'Output path for the fixed file (default: <input-dir>/{FIXED_FILENAME})'
    )

    parser.add_argument(
        '--smooth',
        action='store_true',
        help='With --fix, also prepend the lead-in phrase to roleDefinitions of rebuilt modes'
    )

    parser.add_argument(
        '--config',
        type=Path,
        help='Rules file overriding tool groups and fallback values (YAML, TOML or JSON)'
    )

    parser.add_argument(
        '--format',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed output (debug logging)'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Only log errors'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        help='Write JSON log lines to this file'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose and args.quiet:
        parser.error("--verbose and --quiet are mutually exclusive")

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    setup_logger(log_file=args.log_file, level=level, context=LogContext(file_path=str(args.path)))

    try:
        rules = load_rules(args.config)
    except (ConfigValidationError, FileNotFoundError, ValueError) as e:
        logger.debug(str(e), extra={'file_path': str(args.config), 'error_code': 'CFG-01'})
        print(error(f"ERROR: Failed to load rules: {e}"), file=sys.stderr)
        return EXIT_INVALID

    if args.fix and args.format == 'text':
        target = args.output or default_output_path(args.path)
        print(f"Fix mode enabled. Output will be written to: {target}")

    validator = ModesValidator(rules=rules, fix_mode=args.fix, smooth=args.smooth)
    outcome = validator.run(args.path, args.output)

    if args.format == 'json':
        report = generate_json_report(
            outcome.result,
            outcome.fixed,
            str(outcome.written_to) if outcome.written_to else None
        )
        print(json.dumps(report, indent=2, ensure_ascii=False))
        return outcome.exit_code

    print(render_console(outcome.result, outcome.fixed, verbose=args.verbose))

    if outcome.written_to is not None:
        print(success(f"\n✅ Fixed version written to: {outcome.written_to}"))
    elif outcome.write_error is not None:
        print(error(f"\n❌ ERROR: Failed to write fixed file: {outcome.write_error}"))
    elif args.fix:
        print("\nNothing to fix.")

    return outcome.exit_code


def cli():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
