# cowlang/tokenizer.py
# Splits COW source into word tokens and resolves them against the registry.
# Words that are not command names are comments: they are kept by tokenize()
# and classify(), and dropped by parse_program().

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .commands import DEFAULT_REGISTRY, Command, CommandRegistry

WORD_RE = re.compile(r"\w+")

KEYWORD = "keyword"
COMMENT = "comment"


@dataclass(frozen=True)
class Token:
    value: str
    start: int
    end: int


def tokenize(text: str) -> List[Token]:
    return [Token(m.group(0), m.start(), m.end()) for m in WORD_RE.finditer(text or "")]


def parse_program(text: str, registry: Optional[CommandRegistry] = None) -> List[Command]:
    registry = registry if registry is not None else DEFAULT_REGISTRY
    program: List[Command] = []
    for tok in tokenize(text):
        command = registry.by_name(tok.value)
        if command is not None:
            program.append(command)
    return program


def classify(text: str, registry: Optional[CommandRegistry] = None) -> List[Tuple[Token, str]]:
    """Tag every word as 'keyword' (a command) or 'comment' for highlighters."""
    registry = registry if registry is not None else DEFAULT_REGISTRY
    return [(tok, KEYWORD if tok.value in registry else COMMENT) for tok in tokenize(text)]


def autocomplete_names(registry: Optional[CommandRegistry] = None) -> List[str]:
    return (registry if registry is not None else DEFAULT_REGISTRY).names()
