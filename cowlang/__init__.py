"""cowlang: a step-wise interpreter for the COW esoteric language."""

from .commands import DEFAULT_REGISTRY, BadEval, Command, CommandRegistry, build_registry
from .cow_io import BufferIO, ConsoleIO, override_io
from .errors import InputExhausted, RuntimeErrorCow, StepLimitExceeded
from .machine import Cow, Skip
from .runner import RunOptions, run_program_from_file, run_program_text
from .tokenizer import classify, parse_program, tokenize

__version__ = "0.1.0"
