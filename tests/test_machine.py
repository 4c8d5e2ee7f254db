# tests/test_machine.py
import pytest

from cowlang.commands import DEFAULT_REGISTRY, BadEval, build_registry
from cowlang.cow_io import BufferIO
from cowlang.machine import Cow, Skip
from cowlang.tokenizer import parse_program


def _machine(src: str, chars: str = "", numbers=(), memory_size: int = 8):
    io = BufferIO(chars, numbers)
    return Cow(parse_program(src), memory_size=memory_size, io=io), io


def _record(cow: Cow):
    events = []
    for name in ("valueChanged", "cursorChanged", "registerChanged", "badEval"):
        cow.on(name, lambda *a, _n=name: events.append((_n,) + a))
    cow.on("done", lambda: events.append(("done",)))
    return events


def _run(cow: Cow, limit: int = 1000) -> int:
    steps = 0
    while not cow.terminated:
        assert steps < limit, "program did not terminate"
        cow.step()
        steps += 1
    return steps


def test_read_int_then_write_int_end_to_end():
    cow, io = _machine("oom OOM", numbers=[65])
    events = _record(cow)
    assert _run(cow) == 2
    assert io.output == [{"kind": "byte", "value": 65}]
    assert cow.terminated
    assert cow.program_counter == 2
    assert events == [("valueChanged", 65), ("done",)]


def test_same_program_gives_same_trace():
    src = "MoO MoO MMM OOO moO MoO MMM mOo OOM MOo MOo"
    traces = []
    for _ in range(2):
        cow, io = _machine(src)
        events = _record(cow)
        _run(cow)
        traces.append((events, io.output, cow.memory))
    assert traces[0] == traces[1]


def test_increment_then_decrement_restores_every_value():
    cow, _ = _machine("")
    inc = DEFAULT_REGISTRY.by_name("MoO")
    dec = DEFAULT_REGISTRY.by_name("MOo")
    for v in range(256):
        cow.value = v
        inc(cow)
        dec(cow)
        assert cow.value == v
        dec(cow)
        inc(cow)
        assert cow.value == v


def test_cell_arithmetic_wraps_modulo_256():
    cow, io = _machine("MOo OOM MoO OOM")
    _run(cow)
    assert io.output == [{"kind": "byte", "value": 255}, {"kind": "byte", "value": 0}]


def test_register_store_then_restore():
    cow, _ = _machine("MoO MoO MMM MMM")
    events = _record(cow)
    _run(cow)
    assert cow.value == 2
    assert cow.register is None
    assert [e for e in events if e[0] == "registerChanged"] == [
        ("registerChanged", 2),
        ("registerChanged", None),
    ]


def test_register_copies_between_cells():
    cow, _ = _machine("MoO MoO MoO MMM moO MMM")
    _run(cow)
    assert cow.memory[:2] == bytes([3, 3])
    assert cow.register is None


def test_zero_clears_cell():
    cow, _ = _machine("MoO MoO OOO")
    _run(cow)
    assert cow.value == 0


def test_eval_loop_is_fatal():
    cow, io = _machine("MoO MoO MoO mOO OOM")
    events = _record(cow)
    _run(cow)
    assert cow.terminated
    assert io.output == []
    assert events[-2:] == [("badEval", BadEval.eval_loop()), ("done",)]
    assert cow.value == 3


@pytest.mark.parametrize("src,value", [
    ("MoO " * 12 + "mOO OOM", 12),
    ("MOo mOO OOM", 255),
])
def test_invalid_command_is_fatal(src, value):
    cow, io = _machine(src)
    events = _record(cow)
    _run(cow)
    assert cow.terminated
    assert io.output == []
    assert ("badEval", BadEval.invalid_command(value)) in events
    assert events[-1] == ("done",)


def test_execute_value_runs_command_in_place():
    # cell = 6 (MoO), so mOO increments once; only one program position consumed
    cow, io = _machine("MoO " * 6 + "mOO OOM")
    steps = _run(cow)
    assert steps == 8
    assert io.output == [{"kind": "byte", "value": 7}]


def test_execute_value_can_jump_back():
    # cell reaches 0 and mOO runs moo (id 0), which finds the MOO by identity
    cow, io = _machine("MoO MOO MOo mOO OOM")
    _run(cow)
    assert io.output == [{"kind": "byte", "value": 0}]


def test_skip_pairs_with_next_moo():
    cow, _ = _machine("MOO moo")
    cow.step()
    assert cow.pending_skip is Skip.SKIP_NEXT_THEN_TO_AFTER_ENDPOINT
    assert not cow.terminated
    cow.step()
    assert cow.pending_skip is Skip.SKIP_TO_AFTER_ENDPOINT
    assert cow.terminated
    assert cow.program_counter == 2


def test_skip_consumes_exactly_two_steps():
    cow, io = _machine("MOO OOM OOM MoO OOM")
    cow.step()
    cow.step()
    assert cow.pending_skip is Skip.SKIP_TO_AFTER_ENDPOINT
    cow.step()
    assert cow.pending_skip is Skip.NONE
    _run(cow)
    assert io.output == [{"kind": "byte", "value": 1}]


def test_skip_not_armed_for_nonzero():
    cow, _ = _machine("MoO MOO")
    cow.step()
    cow.step()
    assert cow.pending_skip is Skip.NONE


def test_loop_runs_until_zero_then_exits():
    cow, io = _machine("oom MOO MOo moo OOM", numbers=[3])
    assert _run(cow) == 14
    assert io.output == [{"kind": "byte", "value": 0}]


def test_jump_back_ignores_moo_right_before():
    cow, io = _machine("MoO MOO moo OOM")
    _run(cow)
    assert io.output == [{"kind": "byte", "value": 1}]


def test_jump_back_without_moo_is_noop():
    cow, io = _machine("moo OOM")
    assert _run(cow) == 2
    assert io.output == [{"kind": "byte", "value": 0}]


def test_jump_back_lands_on_moo():
    cow, _ = _machine("MoO MOO OOM moo OOM")
    for _ in range(4):
        cow.step()
    assert cow.program_counter == 1
    assert cow.command is DEFAULT_REGISTRY.by_name("MOO")


def test_char_io_reads_when_zero():
    cow, io = _machine("Moo", chars="A")
    events = _record(cow)
    _run(cow)
    assert cow.value == 65
    assert io.pending_chars == 0
    assert io.output == []
    assert events == [("valueChanged", 65), ("done",)]


def test_char_io_writes_when_nonzero():
    cow, io = _machine("MoO Moo", chars="Z")
    _run(cow)
    assert io.output == [{"kind": "char", "value": 1}]
    assert io.pending_chars == 1


def test_read_int_is_stored_modulo_256():
    cow, io = _machine("oom OOM moO oom OOM", numbers=[300, -1])
    _run(cow)
    assert io.output == [{"kind": "byte", "value": 44}, {"kind": "byte", "value": 255}]


def test_cursor_wraps_around_tape():
    cow, _ = _machine("mOo", memory_size=4)
    events = _record(cow)
    _run(cow)
    assert cow.cursor == 3
    assert events[0] == ("cursorChanged", 3)

    cow, _ = _machine("moO moO moO moO", memory_size=4)
    _run(cow)
    assert cow.cursor == 0


def test_cells_are_independent():
    cow, _ = _machine("MoO moO MoO MoO mOo")
    _run(cow)
    assert cow.memory[:2] == bytes([1, 2])
    assert cow.cursor == 0


def test_done_fires_once():
    cow, _ = _machine("MoO")
    events = _record(cow)
    _run(cow)
    cow.step()
    cow.step()
    assert events.count(("done",)) == 1


def test_empty_program_terminates_on_first_step():
    cow, _ = _machine("no commands here")
    events = _record(cow)
    assert not cow.terminated
    cow.step()
    assert cow.terminated
    assert events == [("done",)]


def test_state_change_precedes_done():
    cow, _ = _machine("MoO")
    events = _record(cow)
    cow.step()
    assert events == [("valueChanged", 1), ("done",)]


def test_unknown_event_rejected():
    cow, _ = _machine("")
    with pytest.raises(ValueError):
        cow.on("changed", lambda *_: None)


def test_memory_size_must_be_positive():
    with pytest.raises(ValueError):
        Cow([], memory_size=0, io=BufferIO())


@pytest.mark.parametrize("cell,chars,numbers,output,skip,left", [
    # Moo on a nonzero cell writes it as a char and reads nothing
    (4, "x", (), [{"kind": "char", "value": 4}], Skip.NONE, (1, 0)),
    # MOO on a nonzero cell leaves the skip disarmed
    (7, "", (), [], Skip.NONE, (0, 0)),
    # oom replaces the cell with the next integer
    (11, "", (200,), [{"kind": "byte", "value": 200}], Skip.NONE, (0, 0)),
])
def test_execute_value_dispatches_io_and_skip(cell, chars, numbers, output, skip, left):
    cow, io = _machine("MoO " * cell + "mOO OOM", chars=chars, numbers=numbers)
    for _ in range(cell + 1):
        cow.step()
    assert cow.program_counter == cell + 1
    assert cow.pending_skip is skip
    _run(cow)
    expected = output if cell == 11 else output + [{"kind": "byte", "value": cell}]
    assert io.output == expected
    assert (io.pending_chars, io.pending_numbers) == left


def test_execute_value_arms_skip_through_jump_back():
    # cell 0 makes mOO run moo, which lands on MOO; MOO then arms the skip
    cow, _ = _machine("MoO MOO MOo mOO OOM")
    for _ in range(4):
        cow.step()
    assert cow.program_counter == 1
    assert cow.pending_skip is Skip.NONE
    cow.step()
    assert cow.pending_skip is Skip.SKIP_NEXT_THEN_TO_AFTER_ENDPOINT
    assert cow.program_counter == 2


def test_program_from_another_registry_is_rejected():
    other = build_registry()
    with pytest.raises(ValueError):
        Cow(parse_program("MoO MoO MoO mOO", other), io=BufferIO())


def test_machine_uses_its_own_registry():
    other = build_registry()
    cow = Cow(parse_program("MoO MoO MoO mOO", other), io=BufferIO(), registry=other)
    events = _record(cow)
    _run(cow)
    assert ("badEval", BadEval.eval_loop()) in events

    io = BufferIO(numbers=[3])
    cow = Cow(parse_program("oom MOO MOo moo OOM", other), io=io, registry=other)
    assert _run(cow) == 14
    assert io.output == [{"kind": "byte", "value": 0}]
