"""
Colour parsing and interpolation for heat styles.

Accepted colour strings (whitespace is ignored anywhere):

  - ``r,g,b``     three decimal groups of 1-3 digits
  - ``#rgb``      three hex digits, case-insensitive
  - ``#rrggbb``   six hex digits, case-insensitive

Anything else falls back to a caller-supplied default.

No external dependencies, stdlib only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace


_DECIMAL_RE = re.compile(r"^(\d{1,3}),(\d{1,3}),(\d{1,3})$")
_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class Colour:
    """An RGBA colour.  Channels 0-255, alpha 0-1."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def with_alpha(self, alpha: float) -> Colour:
        return replace(self, a=alpha)

    def to_hex(self) -> str:
        """Encode as ``#rrggbbaa``; channels are clamped and rounded."""
        channels = (self.r, self.g, self.b, self.a * 255)
        return "#" + "".join(f"{_clamp_channel(c):02x}" for c in channels)

    def to_rgb(self) -> tuple[int, int, int]:
        return (_clamp_channel(self.r), _clamp_channel(self.g), _clamp_channel(self.b))


def _clamp_channel(value: float) -> int:
    return max(0, min(255, int(round(value))))


# ===================================================================
# Parsing
# ===================================================================

def parse_colour(value: str | None, fallback: Colour) -> Colour:
    """Parse *value* into a Colour, or return *fallback* unchanged."""
    if not value:
        return fallback
    text = _WHITESPACE_RE.sub("", value)

    match = _DECIMAL_RE.match(text)
    if match:
        r, g, b = (int(group) for group in match.groups())
        return Colour(r, g, b)

    match = _HEX_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(d * 2 for d in digits)
        return Colour(
            int(digits[0:2], 16),
            int(digits[2:4], 16),
            int(digits[4:6], 16),
        )

    return fallback


# ===================================================================
# Interpolation
# ===================================================================

def mix_colour(cool: Colour, hot: Colour, fraction: float) -> Colour:
    """Linear interpolation of every channel, alpha included."""
    t = max(0.0, min(1.0, fraction))
    return Colour(
        cool.r + (hot.r - cool.r) * t,
        cool.g + (hot.g - cool.g) * t,
        cool.b + (hot.b - cool.b) * t,
        cool.a + (hot.a - cool.a) * t,
    )


def mix(cool: Colour, hot: Colour, fraction: float) -> str:
    """Interpolate between *cool* (0.0) and *hot* (1.0) as a ``#rrggbbaa`` string."""
    return mix_colour(cool, hot, fraction).to_hex()


def blend_over(colour: Colour, background: tuple[int, int, int] = (0, 0, 0)) -> tuple[int, int, int]:
    """Flatten an RGBA colour onto an opaque background (for terminals)."""
    a = max(0.0, min(1.0, colour.a))
    r, g, b = colour.to_rgb()
    return (
        _clamp_channel(background[0] + (r - background[0]) * a),
        _clamp_channel(background[1] + (g - background[1]) * a),
        _clamp_channel(background[2] + (b - background[2]) * a),
    )


def parse_hex(value: str) -> Colour:
    """Decode a ``#rrggbbaa`` string produced by :func:`mix`."""
    digits = value.lstrip("#")
    alpha = int(digits[6:8], 16) / 255 if len(digits) >= 8 else 1.0
    return Colour(
        int(digits[0:2], 16),
        int(digits[2:4], 16),
        int(digits[4:6], 16),
        alpha,
    )
