"""
Brainfuck Execution Engine

This is the whole interpreter core. It integrates:
  - Machine state (state.py): memory pointer, instruction pointer, step-through flag
  - Tape (memory.py): sparse, lazily created cells
  - Channels (channels.py): program input, program output, operator keypress
  - Breakpoint report (debugger.py)

Execution model, one iteration per step():
  1. Create the cell under the memory pointer if absent (pointer-driven,
     happens before every instruction, including ones that ignore memory)
  2. Step-through mode: echo the instruction, wait for a keypress
  3. Dispatch on the instruction character
  4. ip += 1

Brackets relocate ip onto the matching bracket itself; step 4 then moves
past it. '[' on a nonzero cell falls straight into the body, and only the
closing ']' jumps back, so a loop is never re-tested at its top.

Termination reasons:
  - DONE:     ip ran past the end of the program
  - FAULT:    an instruction failed; details in Engine.fault
  - TIMEOUT:  config.max_steps instructions executed

Usage:
    engine = Engine("++++++++[>++++++++<-]>+.", stdout=CapturedOutput())
    reason = engine.run()
    print(engine.stdout.getvalue())   # "A"
"""

import logging
from collections import deque
from enum import Enum
from typing import Callable, Dict, List, Optional

from rich.console import Console

from .channels import ConsoleInput, ConsoleKeypress, ConsoleOutput
from .config import EOF_MINUS_ONE, EOF_ZERO, EngineConfig
from .debugger import BreakpointReport, echo_instruction, echo_skipped
from .errors import FaultKind, InterpreterFault, UnmatchedBracketError
from .memory import Tape
from .state import MachineState

log = logging.getLogger(__name__)


class StopReason(Enum):
    DONE = 'DONE'
    FAULT = 'FAULT'
    TIMEOUT = 'TIMEOUT'


# ══════════════════════════════════════════════
# Bracket matching
# ══════════════════════════════════════════════

def find_matching_forward(program: str, index: int) -> int:
    """Index of the ']' matching the '[' at index.

    Scans every character after the '[' (comments included), counting
    nested '[' up and ']' down, until a ']' is found at depth zero.
    """
    depth = 0
    pos = index + 1
    while True:
        if pos >= len(program):
            raise UnmatchedBracketError('[', index)
        ch = program[pos]
        if ch == ']' and depth == 0:
            return pos
        if ch == '[':
            depth += 1
        elif ch == ']':
            depth -= 1
        pos += 1


def find_matching_backward(program: str, index: int) -> int:
    """Index of the '[' matching the ']' at index.

    Mirror of find_matching_forward: walking backwards, ']' opens a
    nesting level and '[' closes one. Never indexes below 0.
    """
    depth = 0
    pos = index - 1
    while True:
        if pos < 0:
            raise UnmatchedBracketError(']', index)
        ch = program[pos]
        if ch == '[' and depth == 0:
            return pos
        if ch == ']':
            depth += 1
        elif ch == '[':
            depth -= 1
        pos -= 1


class Engine:
    """Brainfuck interpreter with breakpoints and step-through.

    All channels are optional; the defaults talk to the process console.
    Pass BufferedInput / CapturedOutput / ScriptedKeypress and a
    Console(file=io.StringIO()) to run without a terminal.
    """

    def __init__(self, program: str, *, config: Optional[EngineConfig] = None,
                 stdin=None, stdout=None, keypress=None,
                 console: Optional[Console] = None):
        self.program = str(program)
        self.config = config or EngineConfig()
        self.policy = self.config.cell_policy

        # Core components
        self.state = MachineState()
        self.tape = Tape(self.policy)

        # Channels
        self.stdin = stdin or ConsoleInput()
        self.stdout = stdout or ConsoleOutput()
        self.keypress = keypress or ConsoleKeypress()
        self.console = console or Console(highlight=False)

        self.fault: Optional[InterpreterFault] = None

        # Most recent executed instructions, kept only when tracing
        self.trace: Optional[deque] = (
            deque(maxlen=self.config.trace_depth) if self.config.trace_depth else None)

        self._dispatch = self._build_dispatch()

    def reset(self):
        """Forget all state so the same program can run again."""
        self.state.reset()
        self.tape.clear()
        self.fault = None
        if self.trace is not None:
            self.trace.clear()

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[StopReason]:
        """Execute one instruction. Returns StopReason if stopped, else None."""
        if self.fault is not None:
            return StopReason.FAULT

        state = self.state
        if state.ip >= len(self.program):
            return StopReason.DONE

        max_steps = self.config.max_steps
        if max_steps is not None and state.steps >= max_steps:
            return StopReason.TIMEOUT

        self.tape.touch(state.pointer)
        instruction = self.program[state.ip]

        if self.trace is not None:
            self.trace.append(
                f"{state.ip:>6}: {instruction!r:<6} ptr={state.pointer} "
                f"cell={self.tape.read(state.pointer)}")

        try:
            if state.step_through:
                echo_instruction(self.console, instruction)
                self._wait_for_key()

            handler = self._dispatch.get(instruction)
            if handler is not None:
                handler()
        except InterpreterFault as e:
            return self._record_fault(e.located(instruction, state.ip, state.pointer))
        except Exception as e:
            fault = InterpreterFault(FaultKind.INTERNAL, f"{type(e).__name__}: {e}")
            fault.__cause__ = e
            return self._record_fault(fault.located(instruction, state.ip, state.pointer))

        state.ip += 1
        state.steps += 1
        return None

    def run(self) -> StopReason:
        """Run until the program ends, faults, or hits the step limit."""
        log.info("Running %d-character program (%s cells, EOF %s)",
                 len(self.program), self.policy.name, self.config.eof)
        while True:
            reason = self.step()
            if reason is not None:
                break

        if reason is StopReason.FAULT:
            log.warning("Fault after %d steps: %s", self.state.steps, self.fault.message)
        else:
            log.info("Stopped: %s after %d steps, %d cells allocated",
                     reason.value, self.state.steps, len(self.tape))
        return reason

    def _record_fault(self, fault: InterpreterFault) -> StopReason:
        self.fault = fault
        return StopReason.FAULT

    def _wait_for_key(self):
        try:
            self.keypress.wait()
        except (OSError, EOFError) as e:
            raise InterpreterFault(FaultKind.INPUT, f"keypress wait failed: {e}") from e

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════

    def _build_dispatch(self) -> Dict[str, Callable]:
        """Build instruction character → handler table."""
        dispatch = {
            '>': self._op_right,
            '<': self._op_left,
            '+': self._op_inc,
            '-': self._op_dec,
            '.': self._op_output,
            ',': self._op_input,
            '[': self._op_loop_start,
            ']': self._op_loop_end,
        }
        if self.config.debug_instructions:
            dispatch['$'] = self._op_breakpoint
            dispatch['#'] = self._op_toggle_step
        return dispatch

    def _op_right(self):
        self.state.pointer += 1

    def _op_left(self):
        self.state.pointer -= 1

    def _op_inc(self):
        self.tape.add(self.state.pointer, 1)

    def _op_dec(self):
        self.tape.add(self.state.pointer, -1)

    def _op_output(self):
        value = self.tape.read(self.state.pointer)
        # Unbounded cells print their low 16 bits as a UTF-16 code unit
        code = value & 0xFFFF if self.policy.bits is None else value
        try:
            ch = chr(code)
        except (ValueError, OverflowError) as e:
            raise InterpreterFault(
                FaultKind.OUTPUT, f"cell value {value} is not a valid character code") from e
        try:
            self.stdout.write(ch)
        except (OSError, UnicodeEncodeError) as e:
            raise InterpreterFault(FaultKind.OUTPUT, f"write failed: {e}") from e

    def _op_input(self):
        try:
            ch = self.stdin.read_char()
        except (OSError, UnicodeDecodeError) as e:
            raise InterpreterFault(FaultKind.INPUT, f"read failed: {e}") from e

        pointer = self.state.pointer
        if ch is not None:
            self.tape.write(pointer, ord(ch))
        elif self.config.eof == EOF_MINUS_ONE:
            self.tape.write(pointer, -1)
        elif self.config.eof == EOF_ZERO:
            self.tape.write(pointer, 0)
        # EOF_UNCHANGED: leave the cell alone

    def _op_loop_start(self):
        state = self.state
        if self.tape.read(state.pointer) != 0:
            return
        match = find_matching_forward(self.program, state.ip)
        if state.step_through:
            echo_skipped(self.console, self.program[state.ip + 1:match + 1])
        state.ip = match

    def _op_loop_end(self):
        state = self.state
        if self.tape.read(state.pointer) == 0:
            return
        state.ip = find_matching_backward(self.program, state.ip)

    def _op_breakpoint(self):
        report = BreakpointReport.capture(self.program, self.state, self.tape, self.policy)
        log.debug("Breakpoint at %d (ptr=%d, %d cells)",
                  report.index, report.pointer, len(report.cells))
        report.render(self.console)
        self._wait_for_key()

    def _op_toggle_step(self):
        self.state.step_through = not self.state.step_through
        log.debug("Step-through %s at %d",
                  "enabled" if self.state.step_through else "disabled", self.state.ip)

    # ══════════════════════════════════════════════
    # Inspection
    # ══════════════════════════════════════════════

    def recent_instructions(self) -> List[str]:
        """Trace lines for the last trace_depth instructions (oldest first)."""
        return list(self.trace) if self.trace is not None else []
