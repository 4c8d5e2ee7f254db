# cowlang/receipts.py
# Run receipts: skeleton, source hashing, machine snapshot and schema checks.

from __future__ import annotations
import datetime as _dt
import hashlib
import json
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator

from .machine import Cow

ENGINE = "cow"
SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "cow-receipt.schema.json"

_validator: Optional[Draft202012Validator] = None


def _now_utc_iso() -> str:
    now = _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0, tzinfo=None)
    return now.isoformat() + "Z"


def source_hash(text: str) -> str:
    return "sha256:" + hashlib.sha256(text.encode("utf-8")).hexdigest()


def make_base_receipt(text: str, path: Optional[str] = None) -> Dict[str, Any]:
    module: Dict[str, Any] = {"hash": source_hash(text)}
    if path:
        module["path"] = str(path)
    return {
        "engine": ENGINE,
        "module": module,
        "run": {"timestamp": _now_utc_iso(), "uuid": str(uuid.uuid4())},
        "logs": [],
        "steps": [],
    }


def machine_snapshot(cow: Cow) -> Dict[str, Any]:
    cells = {str(i): v for i, v in enumerate(cow.memory) if v}
    return {
        "cursor": cow.cursor,
        "programCounter": cow.program_counter,
        "register": cow.register,
        "memorySize": cow.memory_size,
        "cells": cells,
    }


def log_entry(level: str, event: str, message: str, **extra: Any) -> Dict[str, Any]:
    entry = {"level": level, "event": event, "message": message}
    entry.update(extra)
    return entry


def load_schema() -> Dict[str, Any]:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def _get_validator() -> Draft202012Validator:
    global _validator
    if _validator is None:
        _validator = Draft202012Validator(load_schema())
    return _validator


def receipt_errors(receipt: Dict[str, Any]) -> List[str]:
    """All schema violations as readable strings (empty when valid)."""
    out = []
    for err in sorted(_get_validator().iter_errors(receipt), key=lambda e: list(e.path)):
        where = "/".join(str(p) for p in err.path) or "<root>"
        out.append(f"{where}: {err.message}")
    return out


def validate_receipt(receipt: Dict[str, Any]) -> None:
    """Raise jsonschema.ValidationError if the receipt does not match the schema."""
    _get_validator().validate(receipt)
