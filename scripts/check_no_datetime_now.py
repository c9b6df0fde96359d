#!/usr/bin/env python3
"""Pre-commit hook to prevent direct datetime.now() calls in production code.

Every timestamp the engine writes (activities, updated_at, timer starts,
recurrence checks) must come from an injected TimeAuthorityProtocol so
tests can freeze and advance the clock. This script scans src/ for
datetime.now() and datetime.utcnow() calls and fails if any are found
outside the system clock adapter.

Calls are found by walking the AST, so mentions in docstrings and
comments are not reported.

Usage:
    python scripts/check_no_datetime_now.py [src_directory]

Exit codes:
    0: No violations found
    1: Violations found - datetime.now() detected in production code
"""

import ast
import sys
from pathlib import Path

FORBIDDEN_METHODS = frozenset({"now", "utcnow"})

# The system clock adapter is THE source of truth for time
ALLOWED_FILES = {
    Path("infrastructure/adapters/system_time_authority.py"),
}


def _is_datetime_reference(node: ast.expr) -> bool:
    """Match ``datetime`` and ``datetime.datetime``."""
    if isinstance(node, ast.Name):
        return node.id == "datetime"
    if isinstance(node, ast.Attribute):
        return node.attr == "datetime" and _is_datetime_reference(node.value)
    return False


def find_violations(source: str, filename: str = "<string>") -> list[int]:
    """Return the line numbers of direct datetime clock calls in ``source``.

    Raises:
        SyntaxError: If ``source`` is not valid Python.
    """
    tree = ast.parse(source, filename=filename)
    lines: list[int] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue
        func = node.func
        if (
            isinstance(func, ast.Attribute)
            and func.attr in FORBIDDEN_METHODS
            and _is_datetime_reference(func.value)
        ):
            lines.append(node.lineno)
    return sorted(lines)


def check_file(file_path: Path) -> list[tuple[int, str]]:
    """Check a single file for datetime.now() violations.

    Args:
        file_path: Path to the Python file to check.

    Returns:
        List of (line_number, line_content) tuples for violations.
    """
    try:
        content = file_path.read_text(encoding="utf-8")
        line_numbers = find_violations(content, filename=str(file_path))
    except (OSError, UnicodeDecodeError, SyntaxError) as e:
        print(f"Warning: Could not parse {file_path}: {e}", file=sys.stderr)
        return []

    source_lines = content.splitlines()
    return [(n, source_lines[n - 1].strip()) for n in line_numbers]


def scan(src_path: Path) -> dict[str, list[tuple[int, str]]]:
    """Scan every module under ``src_path`` except the allowed files."""
    all_violations: dict[str, list[tuple[int, str]]] = {}
    for py_file in sorted(src_path.rglob("*.py")):
        if py_file.relative_to(src_path) in ALLOWED_FILES:
            continue
        violations = check_file(py_file)
        if violations:
            all_violations[str(py_file)] = violations
    return all_violations


def main() -> int:
    """Main entry point for the pre-commit hook.

    Returns:
        Exit code: 0 for success, 1 for violations found.
    """
    src_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("src")

    if not src_path.exists():
        print("Warning: src/ directory not found, skipping check")
        return 0

    all_violations = scan(src_path)

    if not all_violations:
        print("No datetime.now() violations found in src/")
        return 0

    print("Direct datetime.now() calls detected!")
    print()
    print("Violations found:")
    print()

    for file_path, violations in all_violations.items():
        print(f"  {file_path}:")
        for line_num, line_content in violations:
            print(f"    Line {line_num}: {line_content}")
        print()

    print("How to fix:")
    print("  1. Inject TimeAuthorityProtocol in your service constructor")
    print("  2. Use self._time.now() instead of datetime.now()")
    print()
    print("Example:")
    print("  from src.application.ports.time_authority import TimeAuthorityProtocol")
    print()
    print("  class TimerTracker:")
    print("      def __init__(self, time_authority: TimeAuthorityProtocol) -> None:")
    print("          self._time = time_authority")
    print()
    print("      async def start(self, owner_id: str, task_id: str) -> None:")
    print("          started_at = self._time.now()  # NOT datetime.now()")
    print()

    return 1


if __name__ == "__main__":
    sys.exit(main())
