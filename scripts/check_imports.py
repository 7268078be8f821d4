#!/usr/bin/env python3
"""Check hexagonal architecture import boundaries for docproof.

Layering rules:
- domain/: value objects, models and errors; imports NO other docproof layer
- application/: ports, DTOs and coordinators; may import domain/ only
- infrastructure/: ledger, index and logging adapters; may import domain/
  and application/ (and the config/ package)
- api/: request/response models; may import application/ and domain/

No layer may import bootstrap/, the composition root. Only bootstrap/ wires
infrastructure into coordinators.

Usage:
    python scripts/check_imports.py [package_directory]

Exit codes:
    0: No violations found
    1: Violations found
"""
import ast
import sys
from pathlib import Path

PACKAGE_NAME = "docproof"

# Lower number = more inner layer; inner layers cannot import outer ones
LAYER_HIERARCHY: dict[str, int] = {
    "domain": 0,
    "application": 1,
    "infrastructure": 2,
    "api": 3,
}

# What each layer CAN import from besides itself
ALLOWED_IMPORTS: dict[str, set[str]] = {
    "domain": set(),
    "application": {"domain"},
    "infrastructure": {"domain", "application"},
    "api": {"application", "domain"},
}

# Packages outside the hierarchy that no layer may import
COMPOSITION_ROOTS: frozenset[str] = frozenset({"bootstrap"})

Violation = tuple[str, int, str]


def imported_modules(node: ast.Import | ast.ImportFrom) -> list[str]:
    """Every module named by an import statement.

    `import a, b` names two modules; relative imports name none of the
    docproof layers and are ignored.
    """
    if isinstance(node, ast.ImportFrom):
        return [node.module] if node.module and node.level == 0 else []
    return [alias.name for alias in node.names]


def _get_file_layer(py_file: Path, package_dir: Path) -> str | None:
    """Return the layer a file belongs to, or None outside the layers."""
    try:
        parts = py_file.relative_to(package_dir).parts
    except ValueError:
        return None
    if len(parts) < 2:
        return None
    return parts[0] if parts[0] in LAYER_HIERARCHY else None


def _parse_file(py_file: Path) -> ast.Module | None:
    try:
        return ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
    except (SyntaxError, UnicodeDecodeError) as e:
        print(f"Warning: Could not parse {py_file}: {e}", file=sys.stderr)
        return None


def _check_import_violation(
    module: str, file_layer: str, allowed_layers: set[str]
) -> str | None:
    """Check whether importing module from file_layer breaks a rule.

    Args:
        module: The imported module (e.g., "docproof.domain.models")
        file_layer: Layer of the importing file
        allowed_layers: Layers file_layer may import from

    Returns:
        Violation message, or None when the import is allowed
    """
    module_parts = module.split(".")
    if module_parts[0] != PACKAGE_NAME or len(module_parts) < 2:
        return None

    target = module_parts[1]
    if target in COMPOSITION_ROOTS:
        return f"{file_layer} layer cannot import from {target} (composition root)"
    if target not in LAYER_HIERARCHY or target == file_layer:
        return None
    if target not in allowed_layers:
        return f"{file_layer} layer cannot import from {target}"
    return None


def check_file_imports(py_file: Path, package_dir: Path) -> list[Violation]:
    """Check a single file for import boundary violations.

    Returns:
        List of (file_path, line_number, violation_message) tuples
    """
    file_layer = _get_file_layer(py_file, package_dir)
    if file_layer is None:
        return []

    tree = _parse_file(py_file)
    if tree is None:
        return []

    allowed_layers = ALLOWED_IMPORTS.get(file_layer, set())
    violations: list[Violation] = []
    for node in ast.walk(tree):
        if not isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        for module in imported_modules(node):
            message = _check_import_violation(module, file_layer, allowed_layers)
            if message:
                violations.append((str(py_file), node.lineno, message))
    return violations


def check_import_boundaries(package_dir: Path) -> list[Violation]:
    """Check every Python file under package_dir."""
    if not package_dir.exists():
        print(f"Error: Package directory '{package_dir}' does not exist", file=sys.stderr)
        return []

    violations: list[Violation] = []
    for py_file in sorted(package_dir.rglob("*.py")):
        violations.extend(check_file_imports(py_file, package_dir))
    return violations


def format_violations(violations: list[Violation]) -> str:
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
    if len(sys.argv) > 1:
        package_dir = Path(sys.argv[1])
    else:
        package_dir = Path(__file__).parent.parent / PACKAGE_NAME

    violations = check_import_boundaries(package_dir)
    if violations:
        print(format_violations(violations))
        return 1
    print("No import boundary violations found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
