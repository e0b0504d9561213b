"""Render option defaults, clamp limits and color validation."""

import json
import re
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from types import MappingProxyType

from barx.errors import ConfigError, InvalidColor
from barx.logging import audit, get_logger

log = get_logger("config")

DEFAULTS = MappingProxyType({
    "bar_width": 2,
    "bar_height": 60,
    "margin_left": 10,
    "margin_right": 10,
    "margin_top": 10,
    "margin_bottom": 10,
    "background_color": "#FFFFFF",
    "foreground_color": "#000000",
    "show_text": True,
    "text_size": 12,
    "text_margin": 5,
})

# (min, max) for every integer option
LIMITS = MappingProxyType({
    "bar_width": (1, 50),
    "bar_height": (10, 500),
    "margin_left": (0, 100),
    "margin_right": (0, 100),
    "margin_top": (0, 100),
    "margin_bottom": (0, 100),
    "text_size": (8, 72),
    "text_margin": (0, 50),
})

NAMED_COLORS = frozenset({
    "red", "blue", "green", "yellow", "orange", "purple", "pink",
    "brown", "black", "white", "gray", "grey", "cyan", "magenta",
})

_HEX_COLOR = re.compile(r"#(?:[A-Fa-f0-9]{3}|[A-Fa-f0-9]{6})")


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def is_valid_color(value) -> bool:
    """Accept #RGB, #RRGGBB or a known color name (any case)."""
    if not isinstance(value, str):
        return False
    return bool(_HEX_COLOR.fullmatch(value)) or value.lower() in NAMED_COLORS


def check_color(value: str, role: str) -> str:
    if not is_valid_color(value):
        raise InvalidColor(f"Invalid {role} color format: {value!r}")
    return value


def coerce_int(name: str, value) -> int:
    """Default a non-int value for option name, then clamp it to LIMITS."""
    # bool is an int subclass but never a size
    if not isinstance(value, int) or isinstance(value, bool):
        value = DEFAULTS[name]
    return clamp(value, *LIMITS[name])


def coerce_bool(name: str, value) -> bool:
    return value if isinstance(value, bool) else DEFAULTS[name]


def _str_option(options, name: str) -> str:
    value = options.get(name)
    return value if isinstance(value, str) else DEFAULTS[name]


@dataclass
class RenderOptions:
    """Resolved renderer configuration. Integer fields are always within LIMITS."""

    bar_width: int = DEFAULTS["bar_width"]
    bar_height: int = DEFAULTS["bar_height"]
    margin_left: int = DEFAULTS["margin_left"]
    margin_right: int = DEFAULTS["margin_right"]
    margin_top: int = DEFAULTS["margin_top"]
    margin_bottom: int = DEFAULTS["margin_bottom"]
    background_color: str = DEFAULTS["background_color"]
    foreground_color: str = DEFAULTS["foreground_color"]
    show_text: bool = DEFAULTS["show_text"]
    text_size: int = DEFAULTS["text_size"]
    text_margin: int = DEFAULTS["text_margin"]

    @classmethod
    def from_mapping(cls, options=None) -> "RenderOptions":
        """Build options from a loose mapping.

        Absent or wrongly-typed values fall back to the default and are then
        clamped; unknown keys are ignored. Colors must be valid.

        Raises:
            InvalidColor: background_color or foreground_color is not accepted.
        """
        options = dict(options or {})
        return cls(
            **{name: coerce_int(name, options.get(name)) for name in LIMITS},
            background_color=check_color(_str_option(options, "background_color"), "background"),
            foreground_color=check_color(_str_option(options, "foreground_color"), "foreground"),
            show_text=coerce_bool("show_text", options.get("show_text")),
        )

    def merged(self, overrides=None) -> "RenderOptions":
        """Return a copy with overrides applied under the from_mapping rules."""
        if not overrides:
            return replace(self)
        return RenderOptions.from_mapping({**self.as_dict(), **overrides})

    def as_dict(self) -> dict:
        return asdict(self)


OPTION_NAMES = tuple(f.name for f in fields(RenderOptions))


def load_options(path: str | Path, overrides=None) -> RenderOptions:
    """Read render option overrides from a JSON object file.

    The file may hold the options at top level or under a "defaults" key.
    Call-site overrides win over file values.

    Raises:
        ConfigError: the file is unreadable or not a JSON object.
        InvalidColor: a color in the merged options is not accepted.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as fh:
            raw = json.load(fh)
    except OSError as e:
        raise ConfigError(f"Cannot read options file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Options file {path} is not valid JSON: {e}") from e

    if isinstance(raw, dict) and isinstance(raw.get("defaults"), dict):
        raw = raw["defaults"]
    if not isinstance(raw, dict):
        raise ConfigError(f"Options file {path} must contain a JSON object")

    unknown = sorted(set(raw) - set(OPTION_NAMES))
    if unknown:
        log.warning("Ignoring unknown render options in %s: %s", path, ", ".join(unknown))

    options = RenderOptions.from_mapping({**raw, **(overrides or {})})
    audit("config.loaded", logger=log, path=str(path), keys=len(raw))
    return options
