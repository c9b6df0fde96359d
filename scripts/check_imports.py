#!/usr/bin/env python3
"""Check hexagonal architecture import boundaries.

This script enforces the task engine layering rules:
- domain/: Task model and pure rules, NO imports from other src layers
- config/: Engine and store settings, NO imports from other src layers
- application/: Engine services and ports, may import from domain/ and config/
- infrastructure/: Adapters, may import from domain/, application/ and config/
- bootstrap/: Composition root, may import from every inner layer
- api/: HTTP surface, may import from application/, domain/, config/ and
  bootstrap/; adapters are reached through bootstrap/ only

Usage:
    python scripts/check_imports.py [src_directory]

Exit codes:
    0: No violations found
    1: Violations found
"""
import ast
import sys
from pathlib import Path

# Layer hierarchy: lower number = more inner layer (more protected)
# Inner layers cannot import from outer layers
LAYER_HIERARCHY: dict[str, int] = {
    "domain": 0,  # Core, innermost - imports NOTHING from src
    "config": 0,  # Settings, shared by every layer
    "application": 1,  # Engine services - imports from domain and config
    "infrastructure": 2,  # Adapters - imports from domain, application
    "bootstrap": 3,  # Wiring - imports adapters for the API
    "api": 4,  # External interface - imports from application
}

# Explicit import rules: what each layer CAN import from
# If a layer is not in this dict, it follows the hierarchy rule
ALLOWED_IMPORTS: dict[str, set[str]] = {
    "domain": set(),
    "config": set(),
    "application": {"domain", "config"},
    "infrastructure": {"domain", "application", "config"},
    "bootstrap": {"domain", "application", "infrastructure", "config"},
    "api": {"application", "domain", "config", "bootstrap"},
}


def get_import_module(node: ast.Import | ast.ImportFrom) -> str | None:
    """Extract the module name from an import statement."""
    if isinstance(node, ast.ImportFrom):
        return node.module
    if isinstance(node, ast.Import) and node.names:
        # For 'import x.y.z', get the first name
        return node.names[0].name
    return None


def imported_modules(node: ast.Import | ast.ImportFrom) -> list[str]:
    """List every module an import statement pulls in.

    ``import a, b`` yields both names, and ``from src import api`` is read
    as an import of ``src.api`` so layer packages cannot be imported whole
    to dodge the check.
    """
    if isinstance(node, ast.Import):
        return [alias.name for alias in node.names]
    if node.module == "src":
        return [f"src.{alias.name}" for alias in node.names]
    return [node.module] if node.module else []


def _get_file_layer(py_file: Path, src_dir: Path) -> str | None:
    """Determine the architectural layer of a file.

    Args:
        py_file: Path to the Python file
        src_dir: Path to the src directory

    Returns:
        The layer name (domain, config, application, infrastructure,
        bootstrap, api) or None
    """
    try:
        relative = py_file.relative_to(src_dir)
    except ValueError:
        return None

    parts = relative.parts
    if not parts:
        return None

    file_layer = parts[0]
    return file_layer if file_layer in LAYER_HIERARCHY else None


def _parse_file(py_file: Path) -> ast.Module | None:
    """Parse a Python file into an AST.

    Args:
        py_file: Path to the Python file

    Returns:
        The parsed AST module or None if parsing failed
    """
    try:
        source = py_file.read_text(encoding="utf-8")
        return ast.parse(source, filename=str(py_file))
    except (SyntaxError, UnicodeDecodeError) as e:
        print(f"Warning: Could not parse {py_file}: {e}", file=sys.stderr)
        return None


def _check_import_violation(
    module: str, file_layer: str, allowed_layers: set[str]
) -> str | None:
    """Check if an import violates layer boundaries.

    Args:
        module: The import module string (e.g., "src.domain.models")
        file_layer: The layer the importing file belongs to
        allowed_layers: Set of layers this file is allowed to import from

    Returns:
        Error message if violation detected, None otherwise
    """
    if not module.startswith("src."):
        return None

    module_parts = module.split(".")
    if len(module_parts) < 2:
        return None

    target_layer = module_parts[1]
    if target_layer not in LAYER_HIERARCHY:
        return None

    # Same-layer imports are always allowed
    if target_layer == file_layer:
        return None

    # Check if this cross-layer import is allowed
    if target_layer not in allowed_layers:
        return f"{file_layer} layer cannot import from {target_layer}"

    return None


def check_file_imports(
    py_file: Path, src_dir: Path
) -> list[tuple[str, int, str]]:
    """Check a single file for import boundary violations.

    Args:
        py_file: Path to the Python file to check
        src_dir: Path to the src directory

    Returns:
        List of (file_path, line_number, violation_message) tuples
    """
    file_layer = _get_file_layer(py_file, src_dir)
    if file_layer is None:
        return []

    tree = _parse_file(py_file)
    if tree is None:
        return []

    violations: list[tuple[str, int, str]] = []
    allowed_layers = ALLOWED_IMPORTS.get(file_layer, set())

    for node in ast.walk(tree):
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            for module in imported_modules(node):
                error_msg = _check_import_violation(module, file_layer, allowed_layers)
                if error_msg:
                    violations.append((str(py_file), node.lineno, error_msg))

    return violations


def check_import_boundaries(src_dir: Path) -> list[tuple[str, int, str]]:
    """Check all Python files in src directory for import boundary violations.

    Args:
        src_dir: Path to the src directory

    Returns:
        List of (file_path, line_number, violation_message) tuples
    """
    violations: list[tuple[str, int, str]] = []

    if not src_dir.exists():
        print(f"Error: Source directory '{src_dir}' does not exist", file=sys.stderr)
        return violations

    for py_file in src_dir.rglob("*.py"):
        file_violations = check_file_imports(py_file, src_dir)
        violations.extend(file_violations)

    return violations


def format_violations(violations: list[tuple[str, int, str]]) -> str:
    """Format violations for human-readable output."""
    if not violations:
        return ""

    lines = ["Import boundary violations found:", ""]
    for file_path, line_no, message in sorted(violations):
        lines.append(f"  {file_path}:{line_no}: {message}")
    lines.append("")
    lines.append(f"Total: {len(violations)} violation(s)")
    return "\n".join(lines)


def main() -> int:
    """Main entry point.

    Returns:
        0 if no violations, 1 if violations found
    """
    # Determine src directory
    if len(sys.argv) > 1:
        src_dir = Path(sys.argv[1])
    else:
        # Default to src/ relative to script location or current directory
        script_dir = Path(__file__).parent
        project_root = script_dir.parent
        src_dir = project_root / "src"

    violations = check_import_boundaries(src_dir)

    if violations:
        print(format_violations(violations))
        return 1
    else:
        print("No import boundary violations found.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
