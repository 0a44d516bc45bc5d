"""Isometric camera with four rotations and three zoom levels."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Tuple

Vector = Tuple[int, int]


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating towards zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


class ZoomLevel(Enum):
    """Zoom levels, valued by their percentage."""

    FULL = 100
    MEDIUM = 50
    SMALL = 25

    def tile_width(self) -> int:
        return _TILE_SIZES[self][0]

    def tile_height(self) -> int:
        return _TILE_SIZES[self][1]

    def gfx_set_offset(self) -> int:
        """Index of the sprite set used at this zoom (GFX, MGFX, SGFX)."""
        return _TILE_SIZES[self][2]


_TILE_SIZES = {
    ZoomLevel.FULL: (64, 31, 0),
    ZoomLevel.MEDIUM: (32, 15, 1),
    ZoomLevel.SMALL: (16, 7, 2),
}


class Rotation(IntEnum):
    """View rotation in 90-degree steps."""

    R0 = 0
    R90 = 1
    R180 = 2
    R270 = 3

    def step_vectors(self) -> Tuple[Vector, Vector]:
        """``(along_row, next_row)`` tile steps for this rotation."""
        return _STEP_VECTORS[self]

    def rotate_cw(self) -> "Rotation":
        return Rotation((self + 1) % 4)

    def rotate_ccw(self) -> "Rotation":
        return Rotation((self - 1) % 4)


_STEP_VECTORS = {
    Rotation.R0: ((1, 1), (-1, 1)),
    Rotation.R90: ((1, -1), (-1, -1)),
    Rotation.R180: ((-1, -1), (1, -1)),
    Rotation.R270: ((-1, 1), (1, 1)),
}


@dataclass
class Camera:
    """Scroll position, tile origin, screen size, zoom and rotation."""

    screen_width: int
    screen_height: int
    origin_x: int = 0
    origin_y: int = 0
    scroll_x: int = 0
    scroll_y: int = 0
    zoom: ZoomLevel = ZoomLevel.FULL
    rotation: Rotation = Rotation.R0

    def viewport_cols(self) -> int:
        return self.screen_width // self.zoom.tile_width() + 2

    def viewport_rows(self) -> int:
        th = self.zoom.tile_height()
        return (th * 11 + self.screen_height) // th

    def look_at(self, tile_x: int, tile_y: int) -> None:
        """Centre the view on a tile."""
        (sx_dx, sx_dy), (sy_dx, sy_dy) = self.rotation.step_vectors()
        self.scroll_x = tile_x * sx_dx + tile_y * sy_dx
        self.scroll_y = tile_x * sx_dy + tile_y * sy_dy
        self._update_origin()

    def _update_origin(self) -> None:
        sx, sy = self.scroll_x, self.scroll_y
        if self.rotation is Rotation.R0:
            ox, oy = sx + sy, sy - sx
        elif self.rotation is Rotation.R90:
            ox, oy = sx - sy, -sx - sy
        elif self.rotation is Rotation.R180:
            ox, oy = -sx - sy, sx - sy
        else:
            ox, oy = sy - sx, sx + sy
        self.origin_x = _tdiv(ox, 2)
        self.origin_y = _tdiv(oy, 2)

    def scroll(self, dx: int, dy: int) -> None:
        """Scroll by a pixel offset, in whole tile-width steps."""
        tw = self.zoom.tile_width()
        self.scroll_x += _tdiv(dx, tw)
        self.scroll_y += _tdiv(dy, tw)
        self._update_origin()

    def screen_to_tile(self, screen_x: int, screen_y: int) -> Tuple[int, int]:
        tw = self.zoom.tile_width()
        th = self.zoom.tile_height()
        cx = screen_x - self.screen_width // 2
        cy = screen_y - self.screen_height // 2
        tile_col = _tdiv(cx, tw) + _tdiv(cy, th)
        tile_row = _tdiv(cy, th) - _tdiv(cx, tw)
        (sx_dx, sx_dy), (sy_dx, sy_dy) = self.rotation.step_vectors()
        return (
            self.origin_x + tile_col * sx_dx + tile_row * sy_dx,
            self.origin_y + tile_col * sx_dy + tile_row * sy_dy,
        )

    def tile_to_screen(self, tile_x: int, tile_y: int) -> Tuple[int, int]:
        tw = self.zoom.tile_width()
        th = self.zoom.tile_height()
        dx = tile_x - self.origin_x
        dy = tile_y - self.origin_y
        return (
            _tdiv((dx - dy) * tw, 2) + self.screen_width // 2,
            _tdiv((dx + dy) * th, 2) + self.screen_height // 2,
        )

    def set_zoom(self, zoom: ZoomLevel) -> None:
        self.zoom = zoom

    def set_rotation(self, rotation: Rotation) -> None:
        self.rotation = rotation
        self._update_origin()


__all__ = ["Camera", "Rotation", "ZoomLevel"]