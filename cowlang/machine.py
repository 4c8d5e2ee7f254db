# cowlang/machine.py
"""COW machine: byte tape, cursor, register and a single-step executor.

- One `step()` handles one program position or one tick of a pending skip.
- State changes are announced synchronously to subscribers:
  valueChanged, cursorChanged, registerChanged, badEval, done.
- The tape is a fixed-size ring: the cursor wraps at both ends.
- Bad evaluations never raise; they notify `badEval` and end the run at the
  close of the same step.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from .commands import DEFAULT_REGISTRY, BadEval, Command, CommandRegistry
from .cow_io import CowIO, ConsoleIO

DEFAULT_MEMORY_SIZE = 30000

EVENTS = ("valueChanged", "cursorChanged", "registerChanged", "badEval", "done")


class Skip(Enum):
    NONE = "none"
    SKIP_NEXT_THEN_TO_AFTER_ENDPOINT = "skipNextThenToAfterEndpoint"
    SKIP_TO_AFTER_ENDPOINT = "skipToAfterEndpoint"


class Cow:
    def __init__(
        self,
        commands: Sequence[Command],
        *,
        memory_size: int = DEFAULT_MEMORY_SIZE,
        io: Optional[CowIO] = None,
        registry: Optional[CommandRegistry] = None,
    ):
        if memory_size < 1:
            raise ValueError(f"memory_size must be positive, got {memory_size}")
        self._registry = registry if registry is not None else DEFAULT_REGISTRY
        self._program: tuple = tuple(commands)
        for i, command in enumerate(self._program):
            if self._registry.by_id(command.id) is not command:
                raise ValueError(f"command {command.name!r} at position {i} does not belong to this machine's registry")
        self._memory = bytearray(memory_size)
        self._io: CowIO = io if io is not None else ConsoleIO()
        self._handlers: Dict[str, List[Callable[..., None]]] = {name: [] for name in EVENTS}

        self._cursor = 0
        self._progcnt = 0
        self._register: Optional[int] = None

        self._skip = Skip.NONE
        self._break = False
        self._done = False
        self._just_jumped = False

    # ---------- subscriptions
    def on(self, event: str, handler: Callable[..., None]) -> None:
        if event not in self._handlers:
            raise ValueError(f"unknown event: {event!r} (expected one of {', '.join(EVENTS)})")
        self._handlers[event].append(handler)

    def _emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers[event]):
            handler(*args)

    # ---------- execution
    def step(self) -> None:
        if self._done:
            return

        command = self.command
        if command is None:
            self._finish()
            return

        if self._skip is Skip.SKIP_NEXT_THEN_TO_AFTER_ENDPOINT:
            self._skip = Skip.SKIP_TO_AFTER_ENDPOINT
        elif self._skip is Skip.SKIP_TO_AFTER_ENDPOINT:
            self._skip = Skip.NONE
        else:
            command(self)

        if self._just_jumped:
            # progcnt was set by the jump itself
            self._just_jumped = False
        else:
            self._progcnt += 1

        if self._break or self.command is None:
            self._finish()

    def _finish(self) -> None:
        if self._done:
            return
        self._done = True
        self._emit("done")

    # ---------- hooks used by command effects
    def skip_back_until(self, predicate: Callable[[Command, int], bool]) -> None:
        for i in range(len(self._program) - 1, -1, -1):
            if predicate(self._program[i], i):
                self._progcnt = i
                self._just_jumped = True
                return

    def skip_next_then_to_after_endpoint(self) -> None:
        self._skip = Skip.SKIP_NEXT_THEN_TO_AFTER_ENDPOINT

    def bad_eval(self, info: BadEval) -> None:
        self._emit("badEval", info)
        self._break = True

    # ---------- state
    @property
    def value(self) -> int:
        return self._memory[self._cursor]

    @value.setter
    def value(self, value: int) -> None:
        stored = int(value) & 0xFF
        self._memory[self._cursor] = stored
        self._emit("valueChanged", stored)

    @property
    def cursor(self) -> int:
        return self._cursor

    @cursor.setter
    def cursor(self, cursor: int) -> None:
        self._cursor = cursor % len(self._memory)
        self._emit("cursorChanged", self._cursor)

    @property
    def register(self) -> Optional[int]:
        return self._register

    @register.setter
    def register(self, register: Optional[int]) -> None:
        self._register = None if register is None else int(register) & 0xFF
        self._emit("registerChanged", self._register)

    @property
    def command(self) -> Optional[Command]:
        if 0 <= self._progcnt < len(self._program):
            return self._program[self._progcnt]
        return None

    @property
    def program(self) -> tuple:
        return self._program

    @property
    def program_counter(self) -> int:
        return self._progcnt

    @property
    def pending_skip(self) -> Skip:
        return self._skip

    @property
    def memory(self) -> bytes:
        return bytes(self._memory)

    @property
    def memory_size(self) -> int:
        return len(self._memory)

    @property
    def terminated(self) -> bool:
        return self._done

    @property
    def io(self) -> CowIO:
        return self._io

    @property
    def registry(self) -> CommandRegistry:
        return self._registry
