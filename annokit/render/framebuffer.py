"""An 8-bit indexed framebuffer with a clipping rectangle."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

RLE_END = 0xFF
"""RLE control byte: end of sprite."""

RLE_NEWLINE = 0xFE
"""RLE control byte: start the next row."""


class Framebuffer:
    """Indexed-colour pixels, rows padded to a 4-byte pitch."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.pitch = (width + 3) & ~3
        self.pixels = bytearray(self.pitch * height)
        self.clip_x = 0
        self.clip_y = 0
        self.clip_w = width
        self.clip_h = height

    def set_clip(self, x: int, y: int, w: int, h: int) -> None:
        self.clip_x = x
        self.clip_y = y
        self.clip_w = w
        self.clip_h = h

    def clear(self, color: int) -> None:
        self.pixels[:] = bytes([color]) * len(self.pixels)

    def _in_clip_x(self, x: int) -> bool:
        return self.clip_x <= x < self.clip_x + self.clip_w

    def _in_clip_y(self, y: int) -> bool:
        return self.clip_y <= y < self.clip_y + self.clip_h

    def _store(self, x: int, y: int, color: int) -> None:
        offset = y * self.pitch + x
        if 0 <= offset < len(self.pixels):
            self.pixels[offset] = color

    def put_pixel(self, x: int, y: int, color: int) -> None:
        """Set one pixel if it lies inside the clip rectangle."""
        if self._in_clip_x(x) and self._in_clip_y(y):
            self._store(x, y, color)

    def blit_raw(self, x: int, y: int, w: int, h: int, data: bytes) -> None:
        """Draw a ``w`` by ``h`` bitmap; index 0 is transparent."""
        for row in range(h):
            sy = y + row
            if not self._in_clip_y(sy):
                continue
            for col in range(w):
                sx = x + col
                if not self._in_clip_x(sx):
                    continue
                src = row * w + col
                if src < len(data) and data[src] != 0:
                    self._store(sx, sy, data[src])

    def blit_rle(
        self,
        x: int,
        y: int,
        rle_data: bytes,
        remap: Optional[Sequence[int]] = None,
    ) -> None:
        """Draw an RLE sprite, optionally passing colours through ``remap``.

        The stream is a series of ``skip, count, pixel * count`` runs;
        ``0xFE`` starts a new row and ``0xFF`` ends the sprite.
        """
        cx = 0
        cy = 0
        it = iter(rle_data)
        for control in it:
            if control == RLE_END:
                break
            if control == RLE_NEWLINE:
                cx = 0
                cy += 1
                continue
            cx += control
            count = next(it, None)
            if count is None:
                break
            sy = y + cy
            in_y = self._in_clip_y(sy)
            for _ in range(count):
                color = next(it, None)
                if color is None:
                    break
                if remap is not None:
                    color = remap[color]
                if in_y and self._in_clip_x(x + cx):
                    self._store(x + cx, sy, color)
                cx += 1

    def to_rgba(self, palette: Sequence[Tuple[int, int, int]]) -> bytes:
        """Expand the visible pixels to opaque RGBA bytes."""
        out = bytearray()
        for y in range(self.height):
            start = y * self.pitch
            for idx in self.pixels[start : start + self.width]:
                r, g, b = palette[idx]
                out += bytes((r, g, b, 255))
        return bytes(out)


__all__ = ["Framebuffer", "RLE_END", "RLE_NEWLINE"]