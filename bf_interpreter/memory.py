"""
Sparse tape memory with lazy cell creation.

Addresses are unbounded signed integers. A cell exists only once the memory
pointer has addressed it (touch()), so a breakpoint dump lists exactly the
cells the program has visited. Reading an absent cell returns 0 without
creating it.

Values are passed through the configured CellPolicy on every write:
unbounded by default, or wrapped to a fixed bit width.
"""

from typing import Callable, Dict, List, Optional, Tuple

from .config import CellPolicy


def format_address(addr: int) -> str:
    """0x%08X, with a leading '-' for negative addresses."""
    if addr < 0:
        return f"-0x{-addr:08X}"
    return f"0x{addr:08X}"


class Tape:
    """Sparse int -> int cell map."""

    def __init__(self, policy: Optional[CellPolicy] = None):
        self.policy = policy or CellPolicy()
        self._cells: Dict[int, int] = {}

        # Watchpoints: addr -> [callback(addr, old, new)]
        self._watchpoints: Dict[int, List[Callable]] = {}

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, addr: int) -> bool:
        return addr in self._cells

    # --- Core access ---

    def touch(self, addr: int) -> int:
        """Create the cell at addr with value 0 if absent; return its value."""
        if addr not in self._cells:
            self._cells[addr] = 0
        return self._cells[addr]

    def read(self, addr: int) -> int:
        return self._cells.get(addr, 0)

    def write(self, addr: int, value: int):
        """Store a value (normalized by the cell policy). Fires watchpoints."""
        value = self.policy.normalize(value)
        old = self._cells.get(addr, 0)
        self._cells[addr] = value

        if addr in self._watchpoints:
            for cb in self._watchpoints[addr]:
                cb(addr, old, value)

    def add(self, addr: int, delta: int) -> int:
        self.write(addr, self.read(addr) + delta)
        return self._cells[addr]

    def cells(self) -> List[Tuple[int, int]]:
        """Allocated cells as (addr, value), ascending by address."""
        return sorted(self._cells.items())

    def clear(self):
        self._cells.clear()

    # --- Watchpoints ---

    def add_watchpoint(self, addr: int, callback: Callable):
        """Call callback(addr, old, new) on every write to addr."""
        if addr not in self._watchpoints:
            self._watchpoints[addr] = []
        self._watchpoints[addr].append(callback)

    def remove_watchpoint(self, addr: int, callback: Optional[Callable] = None):
        """Remove a watchpoint. If callback is None, removes all on that addr."""
        if addr in self._watchpoints:
            if callback is None:
                del self._watchpoints[addr]
            else:
                self._watchpoints[addr] = [
                    cb for cb in self._watchpoints[addr] if cb != callback
                ]
