# cowlang/errors.py
from __future__ import annotations


class RuntimeErrorCow(Exception):
    """Host-level failure around a run (the machine itself never raises)."""


class InputExhausted(RuntimeErrorCow):
    def __init__(self, kind: str):
        super().__init__(f"no more {kind} input available")
        self.kind = kind


class StepLimitExceeded(RuntimeErrorCow):
    def __init__(self, limit: int):
        super().__init__(f"step limit of {limit} exceeded before the program finished")
        self.limit = limit
