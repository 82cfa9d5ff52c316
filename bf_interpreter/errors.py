"""
Fault taxonomy for the interpreter.

Every fault is fatal: the engine records the fault, stops, and leaves the
exit-code decision to its caller (see bfi.py).

    FaultKind.UNMATCHED_BRACKET  — bracket scan ran off either end of the program
    FaultKind.INPUT              — reading program input or a keypress failed
    FaultKind.OUTPUT             — cell value not printable, or the write failed
    FaultKind.INTERNAL           — anything else raised by a handler
"""

from enum import Enum
from typing import Optional


class FaultKind(Enum):
    UNMATCHED_BRACKET = 'unmatched bracket'
    INPUT = 'input failure'
    OUTPUT = 'output failure'
    INTERNAL = 'internal error'


class InterpreterFault(Exception):
    """Raised (and recorded by the engine) when an instruction cannot complete.

    Location fields are filled in by the engine via located() once the
    fault reaches the dispatch loop; handlers only supply kind and message.
    """

    def __init__(self, kind: FaultKind, message: str, *,
                 instruction: Optional[str] = None,
                 index: Optional[int] = None,
                 pointer: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.instruction = instruction
        self.index = index
        self.pointer = pointer
        super().__init__(message)

    def located(self, instruction: str, index: int, pointer: int) -> 'InterpreterFault':
        """Attach the failing instruction's position. Existing values win."""
        if self.instruction is None:
            self.instruction = instruction
        if self.index is None:
            self.index = index
        if self.pointer is None:
            self.pointer = pointer
        return self

    def diagnostic(self) -> str:
        return (f"error: interpreter exception: {self.message}\n"
                f"   at: instruction {self.index}\n"
                f"  ptr: {self.pointer}\n"
                f" char: {self.instruction}")


class UnmatchedBracketError(InterpreterFault):
    """A '[' or ']' whose partner does not exist in the program."""

    def __init__(self, bracket: str, index: int):
        direction = 'forward' if bracket == '[' else 'backward'
        partner = ']' if bracket == '[' else '['
        super().__init__(
            FaultKind.UNMATCHED_BRACKET,
            f"no matching '{partner}' for '{bracket}' at {index} "
            f"({direction} scan ran off the program)",
            instruction=bracket,
            index=index,
        )


class InvocationError(Exception):
    """Bad command line: no source given, or the source cannot be read."""
