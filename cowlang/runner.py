# cowlang/runner.py
"""Host loop for COW programs.

- Parses source text, builds a machine, steps it until it reports done.
- Output written through the provider is mirrored into the receipt.
- `max_steps` bounds runaway programs; exceeding it raises StepLimitExceeded.
- Returns (machine, receipt); receipts follow schemas/cow-receipt.schema.json.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .commands import DEFAULT_REGISTRY, BadEval, CommandRegistry
from .cow_io import BufferIO, CowIO, ConsoleIO, override_io, render_output
from .errors import StepLimitExceeded
from .machine import DEFAULT_MEMORY_SIZE, EVENTS, Cow, Skip
from .receipts import log_entry, machine_snapshot, make_base_receipt
from .tokenizer import parse_program, tokenize

DEFAULT_MAX_STEPS = 1_000_000


@dataclass
class RunOptions:
    memory_size: int = DEFAULT_MEMORY_SIZE
    max_steps: Optional[int] = DEFAULT_MAX_STEPS
    trace: bool = False


def run_program_text(
    text: str,
    io: Optional[CowIO] = None,
    options: Optional[RunOptions] = None,
    registry: Optional[CommandRegistry] = None,
    *,
    path: Optional[str] = None,
) -> Tuple[Cow, Dict[str, Any]]:
    opts = options or RunOptions()
    registry = registry if registry is not None else DEFAULT_REGISTRY
    base_io = io if io is not None else ConsoleIO()

    receipt = make_base_receipt(text, path)
    output: List[Dict[str, Any]] = []

    def write_char(code: int) -> None:
        output.append({"kind": "char", "value": int(code)})
        base_io.write_char(code)

    def write_byte(byte: int) -> None:
        output.append({"kind": "byte", "value": int(byte)})
        base_io.write_byte(byte)

    program = parse_program(text, registry)
    cow = Cow(
        program,
        memory_size=opts.memory_size,
        io=override_io(base_io, write_char=write_char, write_byte=write_byte),
        registry=registry,
    )

    bad: List[BadEval] = []
    cow.on("badEval", bad.append)

    current: Dict[str, Any] = {}
    if opts.trace:
        def recorder(event: str):
            def record(*args: Any) -> None:
                if current:
                    payload = args[0] if args else None
                    if isinstance(payload, BadEval):
                        payload = payload.to_dict()
                    current.setdefault("events", []).append({"event": event, "value": payload})
            return record
        for name in EVENTS:
            cow.on(name, recorder(name))

    steps = 0
    while not cow.terminated:
        if opts.max_steps is not None and steps >= opts.max_steps:
            raise StepLimitExceeded(opts.max_steps)
        command = cow.command
        if command is None:
            cow.step()
            break
        steps += 1
        if opts.trace:
            current = {
                "step": steps,
                "pc": cow.program_counter,
                "command": command.name,
                "action": "exec" if cow.pending_skip is Skip.NONE else "skip",
            }
            receipt["steps"].append(current)
        cow.step()

    receipt["status"] = "badEval" if bad else "ok"
    receipt["program"] = {"tokens": len(tokenize(text)), "commands": len(program)}
    receipt["stepsExecuted"] = steps
    receipt["machine"] = machine_snapshot(cow)
    receipt["output"] = output
    if isinstance(base_io, BufferIO):
        receipt["stdout"] = render_output(output)
    receipt["badEval"] = bad[0].to_dict() if bad else None
    for info in bad:
        if info.kind == BadEval.INVALID_COMMAND:
            message = f"mOO: no command with id {info.value}"
        else:
            message = "mOO: refusing to execute itself"
        receipt["logs"].append(log_entry("error", "badEval", message, info=info.to_dict()))
    receipt["logs"].append(log_entry("info", "done", f"finished after {steps} step(s)", steps=steps))
    return cow, receipt


def run_program_from_file(
    program_path: str,
    io: Optional[CowIO] = None,
    options: Optional[RunOptions] = None,
    registry: Optional[CommandRegistry] = None,
) -> Tuple[Cow, Dict[str, Any]]:
    text = Path(program_path).read_text(encoding="utf-8")
    return run_program_text(text, io, options, registry, path=str(program_path))


def run_with_inputs(
    text: str,
    chars: str = "",
    numbers: Optional[List[int]] = None,
    options: Optional[RunOptions] = None,
) -> Tuple[Cow, Dict[str, Any]]:
    """Convenience for scripted runs: buffered input, output kept in the receipt."""
    return run_program_text(text, BufferIO(chars, numbers or []), options)
