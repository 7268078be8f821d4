#!/usr/bin/env python3
"""Fail when production code reads the wall clock directly.

Every timestamp in docproof (created_at, last_verified_at, metadata
uploadedAt, development ledger block times) comes from an injected
TimeAuthorityProtocol so tests can pin time with FakeTimeAuthority.
This script scans the package for datetime.now() / datetime.utcnow() calls
outside the system time authority.

Usage:
    python scripts/check_no_datetime_now.py [package_directory]

Exit codes:
    0: No violations found
    1: Direct wall-clock reads found
"""

import re
import sys
from pathlib import Path

DATETIME_NOW_PATTERN = re.compile(r"datetime\s*\.\s*(now|utcnow)\s*\(")

# The only module allowed to read the wall clock
ALLOWED_FILES = frozenset({"application/services/time_authority_service.py"})


def check_file(file_path: Path) -> list[tuple[int, str]]:
    """Return (line_number, line) pairs with direct wall-clock reads."""
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return []

    violations: list[tuple[int, str]] = []
    for line_num, line in enumerate(content.splitlines(), start=1):
        stripped = line.lstrip()
        if stripped.startswith("#"):
            continue
        if DATETIME_NOW_PATTERN.search(line):
            violations.append((line_num, stripped))
    return violations


def scan_package(package_dir: Path) -> dict[str, list[tuple[int, str]]]:
    """Scan every module under package_dir except the allowed ones."""
    found: dict[str, list[tuple[int, str]]] = {}
    for py_file in sorted(package_dir.rglob("*.py")):
        relative = py_file.relative_to(package_dir).as_posix()
        if relative in ALLOWED_FILES:
            continue
        violations = check_file(py_file)
        if violations:
            found[relative] = violations
    return found


def main() -> int:
    if len(sys.argv) > 1:
        package_dir = Path(sys.argv[1])
    else:
        package_dir = Path(__file__).parent.parent / "docproof"

    if not package_dir.exists():
        print(f"Warning: {package_dir} not found, skipping check")
        return 0

    found = scan_package(package_dir)
    if not found:
        print("No direct wall-clock reads found.")
        return 0

    print("Direct datetime.now() calls detected; inject a TimeAuthorityProtocol instead:")
    print()
    for relative, violations in found.items():
        print(f"  {relative}:")
        for line_num, line in violations:
            print(f"    Line {line_num}: {line}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
