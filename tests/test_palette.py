import pytest

from annokit.render.palette import (
    NUM_PLAYER_COLORS,
    build_luminance_remap,
    build_tinted_remap,
    nearest_color,
    resolve_named_colors,
)


def grayscale():
    return [(i, i, i) for i in range(256)]


def primaries():
    palette = [(128, 128, 128)] * 256
    palette[10] = (255, 255, 255)
    palette[11] = (0, 0, 0)
    palette[12] = (255, 0, 0)
    palette[13] = (0, 255, 0)
    palette[14] = (0, 0, 255)
    palette[15] = (0, 255, 255)
    palette[16] = (255, 255, 0)
    return palette


def test_one_tinted_table_per_player_color():
    palette = grayscale()
    tables = [
        build_tinted_remap(palette, 1.0, 1.0, 1.0) for _ in range(NUM_PLAYER_COLORS)
    ]
    assert len(tables) == 8
    assert all(list(table) == list(range(256)) for table in tables)


def test_nearest_color_exact_match():
    palette = grayscale()
    assert nearest_color(palette, 77, 77, 77) == 77


def test_nearest_color_ties_go_to_lowest_index():
    palette = [(0, 0, 0)] * 256
    assert nearest_color(palette, 30, 40, 50) == 0


def test_nearest_color_rejects_short_palette():
    with pytest.raises(ValueError):
        nearest_color([(0, 0, 0)] * 10, 0, 0, 0)


def test_luminance_remap_of_grays_is_identity():
    palette = grayscale()
    table = build_luminance_remap(palette)
    assert len(table) == 256
    assert list(table) == list(range(256))


def test_luminance_remap_maps_colors_to_grays():
    palette = grayscale()
    palette[0] = (200, 10, 10)
    table = build_luminance_remap(palette)
    gray_entries = {palette[i] for i in table}
    assert all(r == g == b for r, g, b in gray_entries)


def test_tinted_remap_unit_factors_is_identity():
    palette = grayscale()
    assert list(build_tinted_remap(palette, 1.0, 1.0, 1.0)) == list(range(256))


def test_tinted_remap_zero_factors_maps_to_black():
    palette = grayscale()
    assert set(build_tinted_remap(palette, 0.0, 0.0, 0.0)) == {0}


def test_tinted_remap_saturates():
    palette = grayscale()
    table = build_tinted_remap(palette, 4.0, 4.0, 4.0)
    assert table[255] == 255
    assert table[200] == 255


def test_tinted_remap_negative_factor_clamps_to_zero():
    palette = grayscale()
    assert set(build_tinted_remap(palette, -1.0, -1.0, -1.0)) == {0}


def test_resolve_named_colors():
    colors = resolve_named_colors(primaries())
    assert (colors.white, colors.black, colors.red, colors.green) == (10, 11, 12, 13)
    assert (colors.blue, colors.cyan, colors.yellow) == (14, 15, 16)


def test_builders_reject_wrong_palette_size():
    with pytest.raises(ValueError):
        build_luminance_remap([(0, 0, 0)] * 255)