#!/usr/bin/env python3
"""
COW CLI: run a program file and report the run as a JSON receipt.

Usage:
  python -m cowlang.cow_cli ./Programs/echo.cow --in 65 \
    [--input TEXT] [--memory-size N] [--max-steps N] [--trace] \
    [--print-logs] [--print-receipt] [--receipt-out ./receipt.json] [--validate]

Behavior:
- With --input/--in, reads come from those values and output is buffered
  into the receipt and printed once the run ends.
- Without them, reads prompt on stdin and output goes straight to stdout.
- A bad evaluation exits 1 with status "badEval"; runner failures (step limit,
  exhausted input) emit an error receipt and exit 1.
"""

from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .cow_io import BufferIO, ConsoleIO
from .errors import RuntimeErrorCow
from .receipts import log_entry, make_base_receipt, receipt_errors
from .runner import DEFAULT_MAX_STEPS, RunOptions, run_program_text
from .machine import DEFAULT_MEMORY_SIZE


def write_receipt(path: str | None, receipt: Dict[str, Any], print_receipt: bool) -> None:
    dump = json.dumps(receipt, indent=2, sort_keys=True)
    if print_receipt:
        print(dump)
    if path:
        Path(path).write_text(dump + "\n", encoding="utf-8")


def _positive_int(raw: str) -> int:
    try:
        n = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {n}")
    return n


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="cow",
        description="Run a COW program; print its output and, on request, a run receipt.",
    )
    ap.add_argument("program", help="Path to a COW source file")
    ap.add_argument("--input", default=None, help="Characters served to Moo reads, in order")
    ap.add_argument("--in", dest="numbers", action="append", type=int, default=[],
                    help="Integer served to an oom read (repeatable)")
    ap.add_argument("--memory-size", type=_positive_int, default=DEFAULT_MEMORY_SIZE,
                    help=f"Tape size in cells (default: {DEFAULT_MEMORY_SIZE})")
    ap.add_argument("--max-steps", type=_positive_int, default=DEFAULT_MAX_STEPS,
                    help=f"Abort after this many steps (default: {DEFAULT_MAX_STEPS})")
    ap.add_argument("--no-step-limit", action="store_true", help="Run until the program ends")
    ap.add_argument("--trace", action="store_true", help="Record every step in the receipt")
    ap.add_argument("--print-logs", action="store_true", help="Print receipt logs to stderr")
    ap.add_argument("--print-receipt", action="store_true", help="Print receipt JSON to stdout")
    ap.add_argument("--receipt-out", help="Write receipt JSON to this file")
    ap.add_argument("--validate", action="store_true", help="Check the receipt against its schema")
    args = ap.parse_args(argv)

    path = Path(args.program)
    if not path.is_file():
        ap.error(f"program not found: {path}")

    text = path.read_text(encoding="utf-8")
    scripted = args.input is not None or bool(args.numbers)
    io = BufferIO(args.input or "", args.numbers) if scripted else ConsoleIO()
    options = RunOptions(
        memory_size=args.memory_size,
        max_steps=None if args.no_step_limit else args.max_steps,
        trace=args.trace,
    )

    try:
        _, receipt = run_program_text(text, io, options, path=str(path))
    except RuntimeErrorCow as e:
        err = make_base_receipt(text, str(path))
        err["status"] = "error"
        err["reason"] = str(e)
        err["logs"].append(log_entry("error", "run", str(e)))
        if args.print_logs:
            print(f"[cow] error: {e}", file=sys.stderr)
        write_receipt(args.receipt_out, err, args.print_receipt)
        return 1

    if args.validate:
        problems = receipt_errors(receipt)
        for problem in problems:
            receipt["logs"].append(log_entry("warning", "schema", problem))

    if scripted and not args.print_receipt:
        sys.stdout.write(receipt["stdout"])
        sys.stdout.flush()

    if args.print_logs:
        for entry in receipt["logs"]:
            print(f"[cow] {entry['level']}: {entry['message']}", file=sys.stderr)

    write_receipt(args.receipt_out, receipt, args.print_receipt)
    return 0 if receipt["status"] == "ok" else 1


if __name__ == "__main__":
    raise SystemExit(main())
