# cowlang/cow_io.py
# I/O providers for the COW machine.
#
# Contract (duck-typed, see CowIO):
#   read_char()  -> int   one ASCII character code
#   read_byte()  -> int   one integer; the machine stores it modulo 256
#   write_char(code)
#   write_byte(byte)

from __future__ import annotations
import math
import sys
from collections import deque
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, TextIO

from .errors import InputExhausted


class CowIO(Protocol):
    def read_char(self) -> int: ...
    def read_byte(self) -> int: ...
    def write_char(self, char_code: int) -> None: ...
    def write_byte(self, byte: int) -> None: ...


def parse_number(text: str) -> int:
    """Integer literal (decimal, 0x, 0o, 0b) or a finite float truncated toward zero."""
    try:
        return int(text, 0)
    except ValueError:
        pass
    n = float(text)
    if not math.isfinite(n):
        raise ValueError(f"not a finite number: {text!r}")
    return int(n)


class ConsoleIO:
    """Interactive provider: prompts until the answer is usable."""

    CHAR_PROMPT = "Enter a single ASCII character: "
    BYTE_PROMPT = "Enter a number: "
    INVALID = "Invalid input."

    def __init__(self, ins: Optional[TextIO] = None, outs: Optional[TextIO] = None, prompts: Optional[TextIO] = None):
        self.ins = ins or sys.stdin
        self.outs = outs or sys.stdout
        self.prompts = prompts or sys.stderr

    def _ask(self, prompt: str) -> str:
        self.prompts.write(prompt)
        self.prompts.flush()
        line = self.ins.readline()
        if line == "":
            raise InputExhausted("console")
        return line.rstrip("\r\n")

    def read_char(self) -> int:
        while True:
            s = self._ask(self.CHAR_PROMPT)
            if len(s) != 1 or ord(s) > 127:
                self.prompts.write(self.INVALID + "\n")
                continue
            return ord(s)

    def read_byte(self) -> int:
        while True:
            s = self._ask(self.BYTE_PROMPT).strip()
            try:
                return parse_number(s)
            except ValueError:
                self.prompts.write(self.INVALID + "\n")

    def write_char(self, char_code: int) -> None:
        self.outs.write(chr(char_code))
        self.outs.flush()

    def write_byte(self, byte: int) -> None:
        self.outs.write(f"{byte}\n")
        self.outs.flush()


class BufferIO:
    """Scripted provider: pre-loaded input queues, recorded output events."""

    def __init__(self, chars: str = "", numbers: Iterable[int] = ()):
        self._chars = deque(ord(ch) for ch in chars)
        self._numbers = deque(int(n) for n in numbers)
        self.output: List[Dict[str, Any]] = []

    def read_char(self) -> int:
        if not self._chars:
            raise InputExhausted("character")
        return self._chars.popleft()

    def read_byte(self) -> int:
        if not self._numbers:
            raise InputExhausted("integer")
        return self._numbers.popleft()

    def write_char(self, char_code: int) -> None:
        self.output.append({"kind": "char", "value": int(char_code)})

    def write_byte(self, byte: int) -> None:
        self.output.append({"kind": "byte", "value": int(byte)})

    @property
    def pending_chars(self) -> int:
        return len(self._chars)

    @property
    def pending_numbers(self) -> int:
        return len(self._numbers)

    def text(self) -> str:
        return render_output(self.output)


def render_output(events: Iterable[Dict[str, Any]]) -> str:
    """Render output events the way ConsoleIO prints them."""
    parts = []
    for ev in events:
        if ev["kind"] == "char":
            parts.append(chr(ev["value"]))
        else:
            parts.append(f"{ev['value']}\n")
    return "".join(parts)


_IO_OPS = ("read_char", "read_byte", "write_char", "write_byte")


class _OverriddenIO:
    def __init__(self, base: CowIO, overrides: Dict[str, Callable[..., Any]]):
        self._base = base
        self._overrides = overrides

    def __getattr__(self, name: str) -> Any:
        if name in self._overrides:
            return self._overrides[name]
        return getattr(self._base, name)


def override_io(base: Optional[CowIO] = None, **overrides: Callable[..., Any]) -> CowIO:
    """Replace some provider operations, keep the rest from `base` (console by default)."""
    unknown = sorted(set(overrides) - set(_IO_OPS))
    if unknown:
        raise ValueError(f"unknown I/O operation(s): {', '.join(unknown)}")
    return _OverriddenIO(base if base is not None else ConsoleIO(), overrides)  # type: ignore[return-value]
