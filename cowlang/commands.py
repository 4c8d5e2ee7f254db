# cowlang/commands.py
# The twelve COW commands and the catalogue that numbers them.
#
# Ids are dense, zero-based and follow declaration order. mOO (execute value
# as command) reads a cell and resolves it by id, so the order below is part
# of the language, not a presentation detail.

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .machine import Cow

Effect = Callable[["Cow"], None]


@dataclass(frozen=True, eq=False)
class Command:
    id: int
    name: str
    effect: Effect

    def __call__(self, cow: "Cow") -> None:
        self.effect(cow)

    def __repr__(self) -> str:
        return f"Command({self.id}, {self.name!r})"


@dataclass(frozen=True)
class BadEval:
    """Payload of a badEval notification: invalidCommand(value) or evalLoop."""
    kind: str
    value: Optional[int] = None

    INVALID_COMMAND = "invalidCommand"
    EVAL_LOOP = "evalLoop"

    @classmethod
    def invalid_command(cls, value: int) -> "BadEval":
        return cls(cls.INVALID_COMMAND, value)

    @classmethod
    def eval_loop(cls) -> "BadEval":
        return cls(cls.EVAL_LOOP)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.kind}
        if self.kind == self.INVALID_COMMAND:
            out["value"] = self.value
        return out


# ------------------------------ Effects --------------------------------------

def jump_back(cow: "Cow") -> None:
    """moo: jump to the previous MOO, skipping one that sits right before us."""
    loop_start = cow.registry.by_name("MOO")
    limit = cow.program_counter - 1
    cow.skip_back_until(lambda command, i: i < limit and command is loop_start)


def cursor_left(cow: "Cow") -> None:
    cow.cursor -= 1


def cursor_right(cow: "Cow") -> None:
    cow.cursor += 1


def execute_value(cow: "Cow") -> None:
    """mOO: run the command whose id is the current value.

    An unknown id, or an id naming this very command, is a bad evaluation.
    """
    value = cow.value
    command = cow.registry.by_id(value)
    if command is None:
        cow.bad_eval(BadEval.invalid_command(value))
        return
    if command is cow.command:
        cow.bad_eval(BadEval.eval_loop())
        return
    command(cow)


def char_io(cow: "Cow") -> None:
    if cow.value == 0:
        cow.value = cow.io.read_char()
    else:
        cow.io.write_char(cow.value)


def decrement(cow: "Cow") -> None:
    cow.value -= 1


def increment(cow: "Cow") -> None:
    cow.value += 1


def skip_if_zero(cow: "Cow") -> None:
    """MOO: when the value is zero, let the next two steps pass unexecuted."""
    if cow.value == 0:
        cow.skip_next_then_to_after_endpoint()


def zero(cow: "Cow") -> None:
    cow.value = 0


def register_swap(cow: "Cow") -> None:
    if cow.register is None:
        cow.register = cow.value
    else:
        cow.value = cow.register
        cow.register = None


def write_int(cow: "Cow") -> None:
    cow.io.write_byte(cow.value)


def read_int(cow: "Cow") -> None:
    cow.value = cow.io.read_byte()


# Declaration order == numeric id.
COMMAND_TABLE: Tuple[Tuple[str, Effect], ...] = (
    ("moo", jump_back),
    ("mOo", cursor_left),
    ("moO", cursor_right),
    ("mOO", execute_value),
    ("Moo", char_io),
    ("MOo", decrement),
    ("MoO", increment),
    ("MOO", skip_if_zero),
    ("OOO", zero),
    ("MMM", register_swap),
    ("OOM", write_int),
    ("oom", read_int),
)


# ------------------------------ Registry -------------------------------------

class CommandRegistry:
    """Read-only id/name lookup over an ordered list of commands."""

    def __init__(self, table: Iterable[Tuple[str, Effect]]):
        commands: List[Command] = []
        for i, (name, effect) in enumerate(table):
            commands.append(Command(i, name, effect))
        self._commands: Tuple[Command, ...] = tuple(commands)
        self._by_name: Dict[str, Command] = {c.name: c for c in self._commands}

    def by_id(self, command_id: int) -> Optional[Command]:
        if isinstance(command_id, bool) or not isinstance(command_id, int):
            return None
        if 0 <= command_id < len(self._commands):
            return self._commands[command_id]
        return None

    def by_name(self, name: str) -> Optional[Command]:
        return self._by_name.get(name)

    def names(self) -> List[str]:
        return [c.name for c in self._commands]

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


def build_registry() -> CommandRegistry:
    return CommandRegistry(COMMAND_TABLE)


DEFAULT_REGISTRY = build_registry()
