# annokit

Building blocks for an Anno 1602 style real-time strategy engine. The package is
pure Python and needs nothing outside the standard library.

It has two parts: `annokit.net` for multiplayer sessions over TCP, and
`annokit.render` for an 8-bit indexed software renderer of an isometric tile map.

## Networking: `annokit.net`

### `annokit.net.protocol`

The wire format. Every message is an eight-byte little-endian header
`[command_id: u32][total_size: u32]` followed by the payload; `total_size`
counts the header too.

- `MessageId` is an `IntEnum` of the known command ids (`GAME_DATA`, `PAUSE`,
  `RESUME`, `ACK`, `PLAYER_SYNC`, `SESSION_INFO`, `CHAT_MESSAGE`,
  `FRAG_CONTINUATION`, `PLAYER_DISCONNECT`). `MessageId.from_int(value)`
  returns `None` for an unknown id.
- `MessageHeader` encodes and decodes the header.
- `NetMessage` holds a header and a payload. `NetMessage.build(id, payload)`
  fills in the size; `game_data`, `pause`, `resume`, `chat` (NUL-terminated
  UTF-8 text) and `player_disconnect(ready_state, player_id)` build the common
  messages. `encode()` gives the bytes; `NetMessage.decode(data)` returns
  `(message, bytes_consumed)`, or `None` if `data` does not yet hold a whole
  message, and raises `ValueError` for a size smaller than the header.
- `PlayerSyncData` packs four `(ready_state, player_id)` pairs into 32 bytes
  and back.
- `ConfirmState` counts expected and received acknowledgements.

```python
from annokit.net.protocol import MessageId, NetMessage

data = NetMessage.chat("hello").encode()
message, used = NetMessage.decode(data)
assert message.message_id is MessageId.CHAT_MESSAGE
assert used == len(data)
```

### `annokit.net.session`

`Session` tracks four player slots (`PlayerInfo`) and a per-player pause
bitmask. `add_player` fills the first free slot and returns its index, raising
`SessionFullError` when all four are taken; `remove_player` and `find_player`
return a slot index or `None`; `set_pause`, `clear_pause`, `is_paused` and
`has_enough_players` (two or more) work on the rest of the state.

The event classes `PlayerJoined`, `PlayerLeft`, `GameData`, `PauseChanged`,
`Chat`, `SessionEnded` and `Disconnected` describe what happened on the network.

### `annokit.net.transport`

- `NetHost.bind(addr, session_name)` listens on a TCP address and opens a
  session with the host in slot 0. Up to three clients are accepted, named
  `Player1`, `Player2`, …; further connections are closed. The host relays game
  data and chat to the other clients and broadcasts pause, resume and disconnect
  messages. `address()` gives the address it listens on (useful after binding to
  port 0).
- `NetClient.connect(addr, player_name)` connects to a host.

Both are non-blocking: call `poll()` regularly and handle the list of session
events it returns. Both are context managers and have `close()`.
`DEFAULT_PORT` is 2300. An encoded message longer than 16384 bytes is sent as a
first chunk followed by `FRAG_CONTINUATION` messages.

```python
import time

from annokit.net.protocol import NetMessage
from annokit.net.session import Chat
from annokit.net.transport import DEFAULT_PORT, NetHost

with NetHost.bind(("127.0.0.1", DEFAULT_PORT), "My Game") as host:
    while True:
        for event in host.poll():
            if isinstance(event, Chat):
                print(f"player {event.from_player}: {event.text}")
        time.sleep(0.05)
```

## Rendering: `annokit.render`

- `annokit.render.palette`: `nearest_color` (squared distance, lowest index
  wins ties), `build_luminance_remap`, `build_tinted_remap` and
  `resolve_named_colors` for a 256-entry palette of `(r, g, b)` tuples. Remap
  tables are 256-byte `bytes`.
- `annokit.render.framebuffer`: `Framebuffer` with a clip rectangle,
  `put_pixel`, `blit_raw` (index 0 is transparent), `blit_rle` (runs of
  `skip, count, pixels…`, `0xFE` for a new row, `0xFF` to end, optionally
  through a remap table) and `to_rgba`.
- `annokit.render.camera`: `Camera` with three `ZoomLevel`s (64, 32 and 16
  pixel tiles) and four `Rotation`s; `look_at`, `scroll`, `screen_to_tile`,
  `tile_to_screen`, `viewport_cols` and `viewport_rows`.
- `annokit.render.sprite`: `Sprite`, `SpriteSet` (`draw`,
  `sprite_dimensions`), `SpriteCategory` and `SpriteManager`, which holds one
  set per category and zoom index. `find_case_insensitive` finds a file in a
  directory ignoring case.
- `annokit.render.iso`: `TileCell` (a packed 32-bit cell), `BuildingCategory`,
  `BuildingDef`, `Island`, `WorldMap`, `compute_sprite_id` and `render_map`,
  which draws the visible diamond grid from the `STADTFLD` sprite set, a ground
  pass (ocean, terrain, roads) and then a building pass per row.

```python
from annokit.render.camera import Camera
from annokit.render.framebuffer import Framebuffer
from annokit.render.sprite import Sprite, SpriteSet

fb = Framebuffer(640, 480)
camera = Camera(640, 480)
camera.look_at(10, 10)
fb.clear(0)

sprites = SpriteSet([Sprite(2, 1, bytes([0, 2, 5, 6, 0xFF]))])
x, y = camera.tile_to_screen(10, 10)
sprites.draw(fb, 0, x, y)

rgba = fb.to_rgba([(i, i, i) for i in range(256)])
```

## What it does not do

- It does not read sprite files from disk. Sprite sets are built from `Sprite`
  objects you supply; `SpriteCategory.file_name` and `ZOOM_DIRECTORIES` only
  name where such files would live.
- It does not open a window or show frames; `Framebuffer.to_rgba` hands the
  pixels to whatever displays them.
- The receiving side does not reassemble `FRAG_CONTINUATION` fragments, and
  there is no waiting for acknowledgements: `ConfirmState` only keeps counts.
- There is no command-line program.

## Install

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```