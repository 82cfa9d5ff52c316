"""
Machine state for one interpreter run.

    pointer       — memory pointer, address of the current cell (signed, unbounded)
    ip            — instruction pointer, index into the program
    step_through  — toggled by '#'; echo + wait for keypress on every instruction
    steps         — instructions executed so far
"""


class MachineState:
    """Mutable registers of the interpreter, owned by a single Engine."""

    __slots__ = ('pointer', 'ip', 'step_through', 'steps')

    def __init__(self):
        self.reset()

    def reset(self):
        self.pointer: int = 0
        self.ip: int = 0
        self.step_through: bool = False
        self.steps: int = 0

    def display(self) -> str:
        """One-line summary used by trace output."""
        mode = 'STEP' if self.step_through else 'RUN'
        return f"IP={self.ip} PTR={self.pointer} STEPS={self.steps} [{mode}]"

    def __repr__(self):
        return f"<MachineState {self.display()}>"
