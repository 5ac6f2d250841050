"""
Deterministic tiered grid layout.

Gateways sit on the top tier, subnets in the middle and pods on the bottom
tier in a wrapped grid. Placement follows input order, so identical inputs
always produce identical coordinates. No attempt is made to put related
nodes next to each other.
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional


class Position(NamedTuple):
    x: int
    y: int


@dataclass(frozen=True)
class TierSpec:
    """Placement rule for one tier: a row, or a grid when columns is set."""
    x_step: int
    x_offset: int
    y: int
    columns: Optional[int] = None
    row_step: int = 0

    def position(self, index: int) -> Position:
        if self.columns:
            col, row = index % self.columns, index // self.columns
            return Position(col * self.x_step + self.x_offset, self.y + row * self.row_step)
        return Position(index * self.x_step + self.x_offset, self.y)


@dataclass(frozen=True)
class LayoutConfig:
    gateway: TierSpec
    subnet: TierSpec
    pod: TierSpec

    def tier(self, kind: str) -> TierSpec:
        return getattr(self, kind)


# Single VPC rendered on its own page
DETAIL_LAYOUT = LayoutConfig(
    gateway=TierSpec(x_step=300, x_offset=150, y=100),
    subnet=TierSpec(x_step=250, x_offset=100, y=300),
    pod=TierSpec(x_step=180, x_offset=50, y=500, columns=6, row_step=100),
)

# One compact card per VPC on the overview page
OVERVIEW_LAYOUT = LayoutConfig(
    gateway=TierSpec(x_step=250, x_offset=100, y=80),
    subnet=TierSpec(x_step=200, x_offset=50, y=250),
    pod=TierSpec(x_step=180, x_offset=50, y=420, columns=6, row_step=100),
)


def tier_position(kind: str, index: int, config: LayoutConfig = DETAIL_LAYOUT) -> Position:
    """Position of the index-th node of a kind ("gateway", "subnet" or "pod")."""
    return config.tier(kind).position(index)
