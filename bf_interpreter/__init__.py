"""
bf_interpreter — Brainfuck interpreter with breakpoints and step-through
=========================================================================
A direct (non-compiling) Brainfuck interpreter. Programs run character by
character against a sparse, unbounded tape, with two debug instructions:

    $   breakpoint: dump every allocated cell and the last instruction,
        then wait for a keypress
    #   toggle step-through: echo each instruction and wait for a keypress

Architecture:
    ┌──────────┐    ┌──────────────────────────────────┐    ┌──────────┐
    │ program  │───>│ Engine                           │───>│ output   │
    │ (str)    │    │  MachineState · Tape · dispatch  │    │ channel  │
    └──────────┘    └──────────────────────────────────┘    └──────────┘
                         ^              ^          │
                    input channel   keypress    rich console
                                    channel     (debug display)

    - engine.py:    dispatch loop, bracket matching, fault capture
    - state.py:     memory pointer, instruction pointer, step-through flag
    - memory.py:    sparse tape, lazy cell creation, watchpoints
    - channels.py:  console and in-memory input/output/keypress channels
    - debugger.py:  breakpoint report and step-through echo
    - config.py:    cell width and EOF policy profiles
    - errors.py:    fault kinds
"""

__version__ = "1.0.0"

from .config import EngineConfig, CellPolicy, PROFILES, DEFAULT_PROFILE
from .engine import Engine, StopReason, find_matching_forward, find_matching_backward
from .errors import FaultKind, InterpreterFault, UnmatchedBracketError, InvocationError
from .memory import Tape
from .state import MachineState
from .channels import (
    ConsoleInput, ConsoleOutput, ConsoleKeypress,
    BufferedInput, CapturedOutput, ScriptedKeypress,
)


def run_source(source: str, input_text: str = "", *,
               config: EngineConfig = None, console=None):
    """Run a program against in-memory channels.

    Returns (engine, output_text). Breakpoint and step-through waits
    return immediately; their display goes to `console` (a quiet rich
    Console writing to an in-memory buffer if not given).
    """
    if console is None:
        import io
        from rich.console import Console
        console = Console(file=io.StringIO(), highlight=False, width=120)

    output = CapturedOutput()
    engine = Engine(source, config=config,
                    stdin=BufferedInput(input_text),
                    stdout=output,
                    keypress=ScriptedKeypress(),
                    console=console)
    engine.run()
    return engine, output.getvalue()
