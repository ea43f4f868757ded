#!/usr/bin/env python3
"""Gate: visitor PII must not reach the logs.

Fails if, under src/:
- print( is used in runtime code
- a single-line logger call names a PII-bearing value (email, phone,
  names, client address, raw form or webhook payload) without passing it
  through the redaction helpers

Usage:
    python scripts/gate_security_pii.py [SRC_DIR]
"""

import re
import sys
from pathlib import Path

SENSITIVE_KEYWORDS = (
    "payload",
    "request.form",
    "request.body",
    "email",
    "phone",
    "first_name",
    "last_name",
    "client_identity",
    "submission.message",
)

PRINT_PATTERN = re.compile(r"\bprint\s*\(")

LOGGER_CALL_PATTERN = re.compile(
    r"logger\.(debug|info|warning|error|critical|exception)\s*\("
)

REDACTION_PATTERNS = (
    "safe_log_context",
    "redact_value",
    "redact_string",
    "fingerprint",
)


def _code_part(line: str) -> str:
    return line.split("#", 1)[0]


def check_file(filepath: Path) -> list[str]:
    """Return one message per violation found in ``filepath``."""
    errors: list[str] = []
    try:
        content = filepath.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return []

    for lineno, line in enumerate(content.splitlines(), start=1):
        if line.lstrip().startswith("#"):
            continue
        code = _code_part(line)

        if PRINT_PATTERN.search(code):
            errors.append(f"{filepath}:{lineno}: print() not allowed in runtime code")

        if not LOGGER_CALL_PATTERN.search(code):
            continue
        if any(rp in code for rp in REDACTION_PATTERNS):
            continue
        lowered = code.lower()
        for keyword in SENSITIVE_KEYWORDS:
            if keyword in lowered:
                errors.append(
                    f"{filepath}:{lineno}: logger call with '{keyword}' "
                    "must use redaction (safe_log_context/fingerprint)"
                )

    return errors


def run(src_dir: Path) -> list[str]:
    all_errors: list[str] = []
    for pyfile in sorted(src_dir.rglob("*.py")):
        all_errors.extend(check_file(pyfile))
    return all_errors


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    src_dir = Path(args[0]) if args else Path("src")
    if not src_dir.exists():
        src_dir = Path(__file__).parent.parent / "src"
    if not src_dir.exists():
        sys.stderr.write("Error: src directory not found\n")
        return 1

    errors = run(src_dir)
    if errors:
        sys.stderr.write("PII gate FAILED:\n")
        for err in errors:
            sys.stderr.write(f"  {err}\n")
        return 1

    sys.stdout.write("PII gate passed\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
