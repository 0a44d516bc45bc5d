"""Isometric tile map rendering.

Each screen row is drawn in two passes: ground (terrain and roads) first,
then buildings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Sequence

from annokit.render.camera import Camera
from annokit.render.framebuffer import Framebuffer
from annokit.render.sprite import SpriteCategory, SpriteManager

OCEAN = 0xFF
"""Global map value for a cell that belongs to no island."""


@dataclass(frozen=True)
class TileCell:
    """A tile cell packed into 32 bits."""

    value: int = 0

    def building_id(self) -> int:
        """Building or terrain definition id (bits 0-12)."""
        return self.value & 0x1FFF

    def rotation(self) -> int:
        """Building rotation (bits 13-14)."""
        return (self.value >> 13) & 0x3

    def anim_frame(self) -> int:
        """Animation frame counter (bits 15-18)."""
        return (self.value >> 15) & 0xF

    def player(self) -> int:
        """Owning player index (bits 19-21)."""
        return (self.value >> 19) & 0x7

    def under_construction(self) -> bool:
        return bool((self.value >> 26) & 1)

    def damaged(self) -> bool:
        return bool((self.value >> 27) & 1)

    def is_empty(self) -> bool:
        return self.value == 0


class BuildingCategory(IntEnum):
    ROAD = 1
    PRODUCTION = 3
    WALL = 4
    HUNTING_LODGE = 5
    FISHERY = 6
    MARKET = 7
    TRADING_POST = 8
    RAW_RESOURCE = 9
    TERRAIN = 10
    QUARRY = 11
    RUINS = 12
    RESIDENCE = 13
    STRUCTURE = 14
    MILITARY = 15
    WATCHTOWER = 16
    CHAPEL = 18
    CHURCH = 19
    BATHHOUSE = 20
    THEATER = 21
    CLINIC = 22
    SCHOOL = 23
    UNIVERSITY = 24
    GALLOWS = 25
    FOUNTAIN = 26
    PALACE = 27
    MONUMENT = 28
    TRIUMPHAL_ARCH = 29
    HEADQUARTERS = 30
    PIRATE_DWELLING = 31
    UNKNOWN = 255

    @property
    def is_ground(self) -> bool:
        """Whether this category is drawn in the ground pass."""
        return self in (BuildingCategory.TERRAIN, BuildingCategory.ROAD)


@dataclass(frozen=True)
class BuildingDef:
    """How a building is drawn."""

    id: int
    category: BuildingCategory
    width: int = 1
    height: int = 1
    y_offset: int = 0
    base_sprite_id: int = 0
    anim_frames: int = 0
    anim_speed: int = 0
    rotation_offset: int = 0


@dataclass
class Island:
    """An island placed on the world map, with its own tile grid."""

    id: int
    x: int
    y: int
    width: int
    height: int
    owner: int = 0
    tiles: List[TileCell] = field(default_factory=list)

    def get_tile(self, local_x: int, local_y: int) -> TileCell:
        """The tile at island-local coordinates; outside the island it is empty."""
        if not (0 <= local_x < self.width and 0 <= local_y < self.height):
            return TileCell()
        idx = local_y * self.width + local_x
        return self.tiles[idx] if idx < len(self.tiles) else TileCell()


@dataclass
class WorldMap:
    """Islands plus a global grid of island indices (``OCEAN`` for water)."""

    map_width: int
    map_height: int
    islands: List[Island] = field(default_factory=list)
    global_map: bytes = b""


def compute_sprite_id(definition: BuildingDef, cell: TileCell) -> int:
    """Sprite index for a building, accounting for rotation and animation."""
    sprite_id = definition.base_sprite_id + cell.rotation() * definition.rotation_offset
    if definition.anim_frames > 0:
        sprite_id += cell.anim_frame() % definition.anim_frames
    return sprite_id


def render_map(
    fb: Framebuffer,
    camera: Camera,
    world: WorldMap,
    sprites: SpriteManager,
    building_defs: Sequence[BuildingDef],
    player_remaps: Sequence[Sequence[int]],
) -> None:
    """Draw the part of the world visible through ``camera`` into ``fb``."""
    tw = camera.zoom.tile_width()
    th = camera.zoom.tile_height()
    half_tw = tw // 2

    stadtfld = sprites.get_set(SpriteCategory.STADTFLD, camera.zoom.gfx_set_offset())
    if stadtfld is None:
        return

    rows = camera.viewport_rows()
    cols = camera.viewport_cols()
    (step_x_dx, step_x_dy), (step_y_dx, step_y_dy) = camera.rotation.step_vectors()

    row_tile_x, row_tile_y = camera.origin_x, camera.origin_y
    for row in range(rows):
        x_offset = half_tw if row % 2 == 1 else 0
        screen_y = row * th

        for ground_pass in (True, False):
            tx, ty = row_tile_x, row_tile_y
            for col in range(cols):
                screen_x = col * tw + x_offset
                if 0 <= tx < world.map_width and 0 <= ty < world.map_height:
                    map_idx = ty * world.map_width + tx
                    if map_idx < len(world.global_map):
                        island_idx = world.global_map[map_idx]
                        if island_idx == OCEAN:
                            if ground_pass:
                                stadtfld.draw(fb, 0, screen_x, screen_y)
                        elif island_idx < len(world.islands):
                            island = world.islands[island_idx]
                            cell = island.get_tile(tx - island.x, ty - island.y)
                            bid = cell.building_id()
                            if not cell.is_empty() and bid < len(building_defs):
                                bdef = building_defs[bid]
                                if bdef.category.is_ground == ground_pass:
                                    player = cell.player()
                                    remap = (
                                        player_remaps[player]
                                        if player < len(player_remaps)
                                        else None
                                    )
                                    stadtfld.draw(
                                        fb,
                                        compute_sprite_id(bdef, cell),
                                        screen_x,
                                        screen_y - bdef.y_offset,
                                        remap,
                                    )
                tx += step_x_dx
                ty += step_x_dy

        row_tile_x += step_y_dx
        row_tile_y += step_y_dy


__all__ = [
    "OCEAN",
    "TileCell",
    "BuildingCategory",
    "BuildingDef",
    "Island",
    "WorldMap",
    "compute_sprite_id",
    "render_map",
]