"""Sprite sets and the manager that holds one set per category and zoom level."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from annokit.render.framebuffer import Framebuffer

NUM_CATEGORIES = 11
"""Number of sprite categories."""

NUM_ZOOM_LEVELS = 3
"""Number of zoom levels, each with its own sprite sets."""

ZOOM_DIRECTORIES = ("GFX", "MGFX", "SGFX")
"""Directory holding the sprite files for each zoom index."""


@dataclass(frozen=True)
class Sprite:
    """One RLE-encoded sprite and its pixel size."""

    width: int
    height: int
    rle_data: bytes


@dataclass
class SpriteSet:
    """A loaded collection of sprites, addressed by index."""

    sprites: List[Sprite] = field(default_factory=list)

    def draw(
        self,
        fb: Framebuffer,
        sprite_idx: int,
        x: int,
        y: int,
        player_color: Optional[Sequence[int]] = None,
    ) -> None:
        """Draw a sprite, remapping its colours if ``player_color`` is given.

        Indices outside the set draw nothing.
        """
        if not 0 <= sprite_idx < len(self.sprites):
            return
        fb.blit_rle(x, y, self.sprites[sprite_idx].rle_data, player_color)

    def sprite_dimensions(self, sprite_idx: int) -> Optional[Tuple[int, int]]:
        """``(width, height)`` of a sprite, or None if the index is out of range."""
        if not 0 <= sprite_idx < len(self.sprites):
            return None
        sprite = self.sprites[sprite_idx]
        return sprite.width, sprite.height


class SpriteCategory(IntEnum):
    """Sprite categories in the engine's loading order."""

    STADTFLD = 0
    SOLDAT = 1
    SHIP = 2
    TRAEGER = 3
    MAEHER = 4
    TIERE = 5
    EFFEKTE = 6
    NUMBERS = 7
    SCHATTEN = 8
    FISCHE = 9
    GAUKLER = 10

    @property
    def file_name(self) -> str:
        """Name of the sprite file for this category."""
        return f"{self.name}.BSH"


class SpriteManager:
    """Holds at most one sprite set per (category, zoom index)."""

    def __init__(self) -> None:
        self._sets: List[Optional[SpriteSet]] = [None] * (
            NUM_CATEGORIES * NUM_ZOOM_LEVELS
        )

    @staticmethod
    def _index(category: SpriteCategory, zoom_index: int) -> int:
        return zoom_index * NUM_CATEGORIES + int(category)

    def load_set(
        self, category: SpriteCategory, zoom_index: int, sprite_set: SpriteSet
    ) -> None:
        """Store a set; combinations outside the table are ignored."""
        idx = self._index(category, zoom_index)
        if zoom_index >= 0 and idx < len(self._sets):
            self._sets[idx] = sprite_set

    def get_set(
        self, category: SpriteCategory, zoom_index: int
    ) -> Optional[SpriteSet]:
        idx = self._index(category, zoom_index)
        if zoom_index < 0 or idx >= len(self._sets):
            return None
        return self._sets[idx]


def find_case_insensitive(directory: Path, name: str) -> Optional[Path]:
    """Find an entry of ``directory`` whose name matches ``name`` ignoring case."""
    wanted = name.lower()
    try:
        entries = list(Path(directory).iterdir())
    except OSError:
        return None
    return next((entry for entry in entries if entry.name.lower() == wanted), None)


__all__ = [
    "NUM_CATEGORIES",
    "NUM_ZOOM_LEVELS",
    "ZOOM_DIRECTORIES",
    "Sprite",
    "SpriteSet",
    "SpriteCategory",
    "SpriteManager",
    "find_case_insensitive",
]