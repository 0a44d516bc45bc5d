"""256-colour palettes and the remap tables built from them."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Sequence, Tuple

PALETTE_SIZE = 256
"""Number of entries in a palette and in a remap table."""

NUM_PLAYER_COLORS = 8
"""Number of player colour remap tables."""

Rgb = Tuple[int, int, int]
Palette = Sequence[Rgb]
RemapTable = bytes

_F32 = struct.Struct("<f")


def _f32(value: float) -> float:
    """Round ``value`` to single precision."""
    return _F32.unpack(_F32.pack(value))[0]


def _to_channel(value: float) -> int:
    """Clamp a float into 0..255, truncating towards zero."""
    if value != value or value <= 0.0:
        return 0
    return int(min(value, 255.0))


def _check_palette(palette: Palette) -> None:
    if len(palette) != PALETTE_SIZE:
        raise ValueError(
            f"palette needs {PALETTE_SIZE} entries, got {len(palette)}"
        )


def nearest_color(palette: Palette, r: int, g: int, b: int) -> int:
    """Index of the palette entry closest to ``(r, g, b)``.

    Distance is squared Euclidean; ties go to the lowest index.
    """
    _check_palette(palette)
    best_idx = 0
    best_dist = None
    for idx, (pr, pg, pb) in enumerate(palette):
        dist = (r - pr) ** 2 + (g - pg) ** 2 + (b - pb) ** 2
        if best_dist is None or dist < best_dist:
            best_dist = dist
            best_idx = idx
    return best_idx


def build_luminance_remap(palette: Palette) -> RemapTable:
    """Map every entry to the palette grey nearest its luminance."""
    _check_palette(palette)
    table = bytearray()
    for pr, pg, pb in palette:
        gray = min((pr * 0x22 + pg * 0x21 + pb * 0x21) // 100, 255)
        table.append(nearest_color(palette, gray, gray, gray))
    return bytes(table)


def build_tinted_remap(
    palette: Palette, r_factor: float, g_factor: float, b_factor: float
) -> RemapTable:
    """Map every entry, scaled per channel, to the nearest palette entry."""
    _check_palette(palette)
    factors = (_f32(r_factor), _f32(g_factor), _f32(b_factor))
    table = bytearray()
    for entry in palette:
        r, g, b = (
            _to_channel(_f32(channel * factor))
            for channel, factor in zip(entry, factors)
        )
        table.append(nearest_color(palette, r, g, b))
    return bytes(table)


@dataclass(frozen=True)
class NamedColors:
    """Palette indices of the colours the engine refers to by name."""

    white: int
    black: int
    red: int
    green: int
    blue: int
    cyan: int
    yellow: int


def resolve_named_colors(palette: Palette) -> NamedColors:
    """Look up the nearest palette index for each named colour."""
    return NamedColors(
        white=nearest_color(palette, 255, 255, 255),
        black=nearest_color(palette, 0, 0, 0),
        red=nearest_color(palette, 255, 0, 0),
        green=nearest_color(palette, 0, 255, 0),
        blue=nearest_color(palette, 0, 0, 255),
        cyan=nearest_color(palette, 0, 255, 255),
        yellow=nearest_color(palette, 255, 255, 0),
    )


__all__ = [
    "NUM_PLAYER_COLORS",
    "PALETTE_SIZE",
    "NamedColors",
    "nearest_color",
    "build_luminance_remap",
    "build_tinted_remap",
    "resolve_named_colors",
]