import json

import pytest

from barx.config import DEFAULTS, LIMITS, RenderOptions, is_valid_color, load_options
from barx.errors import ConfigError, InvalidColor


def test_defaults_match_dataclass():
    assert RenderOptions().as_dict() == dict(DEFAULTS)
    assert RenderOptions.from_mapping(None) == RenderOptions()


def test_defaults_are_read_only():
    with pytest.raises(TypeError):
        DEFAULTS["bar_width"] = 9


@pytest.mark.parametrize("name", sorted(LIMITS))
def test_every_int_option_clamps_both_ways(name):
    low, high = LIMITS[name]
    assert getattr(RenderOptions.from_mapping({name: low - 1}), name) == low
    assert getattr(RenderOptions.from_mapping({name: high + 1}), name) == high


@pytest.mark.parametrize("value", ["7", 3.5, None, True, [4]])
def test_wrong_type_int_falls_back(value):
    assert RenderOptions.from_mapping({"bar_width": value}).bar_width == 2


def test_show_text_requires_bool():
    assert RenderOptions.from_mapping({"show_text": 0}).show_text is True
    assert RenderOptions.from_mapping({"show_text": False}).show_text is False


def test_unknown_keys_ignored():
    assert RenderOptions.from_mapping({"unused": "option"}) == RenderOptions()


def test_bad_color_raises():
    with pytest.raises(InvalidColor, match="background"):
        RenderOptions.from_mapping({"background_color": "transparent"})


@pytest.mark.parametrize("value, ok", [
    ("#fff", True), ("#A0b1C2", True), ("Cyan", True), ("gray", True),
    ("#ffff", False), ("fff", False), ("", False), (None, False), ("#fff ", False),
])
def test_is_valid_color(value, ok):
    assert is_valid_color(value) is ok


def test_merged_applies_overrides():
    base = RenderOptions(bar_width=5)
    merged = base.merged({"bar_height": 1000})
    assert merged.bar_width == 5 and merged.bar_height == 500
    assert base.bar_height == 60


def test_load_options(tmp_path):
    path = tmp_path / "barcode.json"
    path.write_text(json.dumps({"bar_width": 3, "foreground_color": "#FF0000", "margin_top": "x"}))
    opts = load_options(path)
    assert opts.bar_width == 3
    assert opts.foreground_color == "#FF0000"
    assert opts.margin_top == 10


def test_load_options_nested_defaults_and_overrides(tmp_path):
    path = tmp_path / "barcode.json"
    path.write_text(json.dumps({"defaults": {"bar_width": 3, "show_text": False}}))
    opts = load_options(path, overrides={"bar_width": 7})
    assert opts.bar_width == 7
    assert opts.show_text is False


def test_load_options_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_options(tmp_path / "nope.json")


def test_load_options_malformed(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        load_options(path)


def test_load_options_not_an_object(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]")
    with pytest.raises(ConfigError):
        load_options(path)


def test_load_options_bad_color(tmp_path):
    path = tmp_path / "color.json"
    path.write_text(json.dumps({"background_color": "nope"}))
    with pytest.raises(InvalidColor):
        load_options(path)
