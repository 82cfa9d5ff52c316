"""
Run configuration: cell policies and named profiles.

A profile is a named bundle of defaults; individual CLI options override
single fields of it.

    reference  — unbounded cells, EOF reads -1
    classic    — 8-bit wrapping cells, EOF leaves the cell unchanged
    wide       — 16-bit wrapping cells, EOF reads 0
"""

from dataclasses import dataclass, replace
from typing import Optional


EOF_MINUS_ONE = 'minus-one'
EOF_ZERO = 'zero'
EOF_UNCHANGED = 'unchanged'
EOF_POLICIES = (EOF_MINUS_ONE, EOF_ZERO, EOF_UNCHANGED)

PROFILES = {
    "reference": {
        "cell_bits": None,
        "eof": EOF_MINUS_ONE,
        "description": "Unbounded integer cells, EOF stores -1",
    },
    "classic": {
        "cell_bits": 8,
        "eof": EOF_UNCHANGED,
        "description": "8-bit wrapping cells, EOF leaves cell unchanged",
    },
    "wide": {
        "cell_bits": 16,
        "eof": EOF_ZERO,
        "description": "16-bit wrapping cells, EOF stores 0",
    },
}

DEFAULT_PROFILE = "reference"


class CellPolicy:
    """Value normalization for a cell width. bits=None means unbounded."""

    __slots__ = ('bits', '_mask')

    def __init__(self, bits: Optional[int] = None):
        if bits is not None and bits <= 0:
            raise ValueError(f"cell width must be positive, got {bits}")
        self.bits = bits
        self._mask = (1 << bits) - 1 if bits else None

    def normalize(self, value: int) -> int:
        if self._mask is None:
            return value
        return value & self._mask

    @property
    def name(self) -> str:
        return "unbounded" if self.bits is None else f"{self.bits}-bit"

    def __repr__(self):
        return f"CellPolicy({self.bits!r})"


@dataclass
class EngineConfig:
    cell_bits: Optional[int] = None
    eof: str = EOF_MINUS_ONE
    max_steps: Optional[int] = None
    trace_depth: int = 0
    debug_instructions: bool = True

    def __post_init__(self):
        if self.eof not in EOF_POLICIES:
            raise ValueError(
                f"unknown EOF policy {self.eof!r} (expected one of {', '.join(EOF_POLICIES)})")
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {self.max_steps}")
        if self.trace_depth < 0:
            raise ValueError(f"trace_depth must be >= 0, got {self.trace_depth}")
        # validates cell_bits
        CellPolicy(self.cell_bits)

    @classmethod
    def from_profile(cls, name: str = DEFAULT_PROFILE, **overrides) -> 'EngineConfig':
        """Build a config from a named profile; keyword overrides win."""
        if name not in PROFILES:
            raise ValueError(f"unknown profile {name!r} (expected one of {', '.join(PROFILES)})")
        profile = PROFILES[name]
        config = cls(cell_bits=profile["cell_bits"], eof=profile["eof"])
        return replace(config, **overrides) if overrides else config

    @property
    def cell_policy(self) -> CellPolicy:
        return CellPolicy(self.cell_bits)
