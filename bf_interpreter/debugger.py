"""
Breakpoint report ('$') and step-through display helpers.

A breakpoint prints:
  - a banner
  - every allocated cell, ascending by address, with the current pointer
    and the total number of allocated cells
  - the previous instruction (the one textually before the '$') with
    before/after values appropriate to its kind:
        > <   old/new pointer
        + -   old/new value
        . ,   cell as a character
        [     whether the loop is being skipped
        ]     whether the loop jumps back
        $     note that back-to-back breakpoints cannot see a state change

Old values are reconstructed from the current state by undoing the
instruction arithmetically.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .config import CellPolicy
from .memory import Tape, format_address
from .state import MachineState


REDUNDANT_BREAKPOINT_NOTE = (
    "You have put two breakpoints next to each other.\n"
    "The state of the program will never change when breakpoints\n"
    "are put next to each other. It is redundant."
)


def cell_as_char(value: int) -> str:
    """repr() of chr(value), or a marker when value is not a code point."""
    if 0 <= value <= 0x10FFFF:
        return repr(chr(value))
    return f"<not a character: {value}>"


def describe_previous(instruction: str, pointer: int, value: int,
                      policy: Optional[CellPolicy] = None) -> List[Tuple[str, str]]:
    """Label/value pairs explaining what the previous instruction did."""
    policy = policy or CellPolicy()
    if instruction == '>':
        return [("Old Pointer", str(pointer - 1)), ("New Pointer", str(pointer))]
    if instruction == '<':
        return [("Old Pointer", str(pointer + 1)), ("New Pointer", str(pointer))]
    if instruction == '+':
        return [("Old Value", str(policy.normalize(value - 1))), ("New Value", str(value))]
    if instruction == '-':
        return [("Old Value", str(policy.normalize(value + 1))), ("New Value", str(value))]
    if instruction in '.,':
        return [("Memory Cell as Char", cell_as_char(value))]
    if instruction == '[':
        return [("Skipping", str(value == 0))]
    if instruction == ']':
        return [("Jumping Back", str(value != 0))]
    if instruction == '$':
        return [("Confused", "True")]
    return []


@dataclass
class BreakpointReport:
    index: int
    pointer: int
    cells: List[Tuple[int, int]] = field(default_factory=list)
    previous: Optional[str] = None
    previous_index: Optional[int] = None
    details: List[Tuple[str, str]] = field(default_factory=list)

    @classmethod
    def capture(cls, program: str, state: MachineState, tape: Tape,
                policy: Optional[CellPolicy] = None) -> 'BreakpointReport':
        report = cls(index=state.ip, pointer=state.pointer, cells=tape.cells())
        if state.ip > 0:
            report.previous_index = state.ip - 1
            report.previous = program[report.previous_index]
            report.details = describe_previous(
                report.previous, state.pointer, tape.read(state.pointer), policy)
        return report

    @property
    def redundant(self) -> bool:
        return self.previous == '$'

    def render(self, console: Console):
        console.print()
        console.print(Text("BREAKPOINT", style="bold red"))
        console.print()

        # memory dump
        console.print(Text("Memory", style="bold"))
        console.print(Text("──────"))
        console.print(Text(f"Current Memory Pointer: {self.pointer}"))

        table = Table(box=box.MINIMAL, show_edge=False, pad_edge=False)
        table.add_column("Memory Ptr")
        table.add_column("Value", justify="right")
        for addr, value in self.cells:
            style = "reverse" if addr == self.pointer else None
            table.add_row(format_address(addr), str(value), style=style)
        console.print(table)
        console.print(Text(f"Total Cells: {len(self.cells)}"))

        # instruction info
        console.print()
        console.print(Text("Last Instruction", style="bold"))
        console.print(Text("────────────────"))
        if self.previous is None:
            console.print(Text(f"Instruction: (none, breakpoint is at {self.index})"))
        else:
            console.print(Text(f"Instruction: {self.previous} @ {self.previous_index}"))
            for label, value in self.details:
                console.print(Text(f"{label}: {value}"))
            if self.redundant:
                console.print()
                console.print(Text(REDUNDANT_BREAKPOINT_NOTE))

        console.print()
        console.print(Text("Press any key to continue execution."))


def echo_instruction(console: Console, instruction: str):
    """Step-through echo of the instruction about to execute."""
    console.out(instruction, end='', highlight=False)


def echo_skipped(console: Console, text: str):
    """Characters passed over by a forward bracket skip, in yellow."""
    if text:
        console.out(text, style='yellow', end='', highlight=False)
