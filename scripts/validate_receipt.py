# scripts/validate_receipt.py
# Validate one or more COW run receipts against the packaged schema.
# Exit policy:
#   default: exit 0 unless a receipt is unreadable or invalid
#   --warnings-as-errors: receipts whose logs carry warnings ALSO cause nonzero
from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path
from typing import List

# Make repo root importable; import cowlang as a package
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from cowlang.receipts import receipt_errors  # noqa: E402


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("receipts", nargs="+", help="Receipt JSON file(s)")
    ap.add_argument("--warnings-as-errors", action="store_true", help="treat logged warnings as errors (nonzero exit)")
    args = ap.parse_args(argv)

    failed = False
    for raw in args.receipts:
        path = Path(raw)
        try:
            receipt = json.loads(path.read_text(encoding="utf-8"))
        except Exception as e:
            print(f"{path}: failed to read receipt JSON: {e}")
            failed = True
            continue

        errors = receipt_errors(receipt)
        warnings = [
            entry.get("message", "")
            for entry in (receipt.get("logs") or [])
            if isinstance(entry, dict) and entry.get("level") == "warning"
        ]
        if errors:
            print(f"{path}: INVALID")
            for e in errors:
                print(" -", e)
            failed = True
        else:
            print(f"{path}: ok (status={receipt.get('status')})")
        for w in warnings:
            print(" - warning:", w)
        if warnings and args.warnings_as_errors:
            failed = True

    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
