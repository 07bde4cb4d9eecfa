"""
Heat style set: one decoration style per heat level.

Level i of N gets mix fraction i/(N-1) (0 for a single level), so
level 0 is the cool colour and level N-1 the hot colour.
"""

from __future__ import annotations

from dataclasses import dataclass

from .colour import mix
from .config import HeatmapConfig


@dataclass(frozen=True, eq=False)
class HeatStyle:
    """One decoration style.  Compared by identity, like an editor decoration handle."""

    index: int
    fraction: float
    background: str
    ruler: str | None = None


def level_fraction(index: int, levels: int) -> float:
    if levels <= 1:
        return 0.0
    return index / (levels - 1)


def build_styles(config: HeatmapConfig) -> list[HeatStyle]:
    """Build a fresh list of ``config.heat_levels`` styles."""
    styles: list[HeatStyle] = []
    for i in range(config.heat_levels):
        fraction = level_fraction(i, config.heat_levels)
        background = mix(config.cool, config.hot, fraction)
        styles.append(HeatStyle(
            index=i,
            fraction=fraction,
            background=background,
            ruler=background if config.show_in_ruler else None,
        ))
    return styles
