"""SVG renderer for Code 128 bar patterns, with file and data-URI output."""

import base64
import re
from pathlib import Path
from xml.sax.saxutils import escape

from barx.config import RenderOptions, check_color, coerce_bool, coerce_int
from barx.errors import (
    ImageTooLarge,
    InvalidFilename,
    InvalidPath,
    PatternTooLarge,
    TextTooLong,
    WriteFailed,
)
from barx.logging import audit, get_logger, trace

log = get_logger("svg")

MAX_PATTERN = 500
MAX_TEXT = 100
MAX_WIDTH = 50000
MAX_HEIGHT = 10000

DATA_URI_PREFIX = "data:image/svg+xml;base64,"
SVG_NS = "http://www.w3.org/2000/svg"

_SAFE_FILENAME = re.compile(r"[a-zA-Z0-9_.-]+\.svg", re.IGNORECASE)
# Characters XML 1.0 does not allow in text content
_XML_INVALID = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _encode(svg: str) -> bytes:
    try:
        return svg.encode("utf-8")
    except UnicodeEncodeError as e:
        raise WriteFailed(f"SVG is not encodable as UTF-8: {e}") from e


class SvgRenderer:
    """Turns a bar pattern into a minimal SVG document.

    Output layout is fixed: the <svg> header, one background <rect>, one
    <rect> per '1' module from left to right, an optional centred <text>
    label, then </svg>. Consumers rely on the first <rect> being the
    background.

    Setters clamp like the constructor and return the renderer so calls can
    be chained::

        SvgRenderer().set_bar_width(3).set_colors("#fff", "blue")
    """

    def __init__(self, options=None):
        if isinstance(options, RenderOptions):
            self._opts = RenderOptions.from_mapping(options.as_dict())
        else:
            self._opts = RenderOptions.from_mapping(options)

    @property
    def options(self) -> RenderOptions:
        """Copy of the current configuration."""
        return self._opts.merged()

    def _show_label(self, text: str) -> bool:
        return self._opts.show_text and bool(text)

    def dimensions(self, pattern: str, text: str = "") -> tuple[int, int]:
        """Canvas (width, height) in pixels for a pattern and label."""
        o = self._opts
        width = len(pattern) * o.bar_width + o.margin_left + o.margin_right
        text_height = o.text_size + o.text_margin if self._show_label(text) else 0
        height = o.bar_height + o.margin_top + o.margin_bottom + text_height
        return width, height

    @trace
    def render(self, pattern: str, text: str = "") -> str:
        """Render a pattern (and optional label) as an SVG string.

        Raises:
            PatternTooLarge: pattern longer than 500 modules.
            TextTooLong: label longer than 100 characters.
            ImageTooLarge: canvas wider than 50000 or taller than 10000 px.
        """
        if len(pattern) > MAX_PATTERN:
            raise PatternTooLarge(f"Pattern too long (max {MAX_PATTERN} characters)")
        if len(text) > MAX_TEXT:
            raise TextTooLong(f"Text too long (max {MAX_TEXT} characters)")

        width, height = self.dimensions(pattern, text)
        if width > MAX_WIDTH:
            raise ImageTooLarge(f"Generated SVG would be too large (width {width} > {MAX_WIDTH})")
        if height > MAX_HEIGHT:
            raise ImageTooLarge(f"Generated SVG would be too large (height {height} > {MAX_HEIGHT})")

        parts = [
            f'<svg width="{width}" height="{height}" viewBox="0 0 {width} {height}" xmlns="{SVG_NS}">',
            f'<rect x="0" y="0" width="{width}" height="{height}" fill="{self._opts.background_color}"/>',
        ]
        parts.extend(self._bars(pattern))
        if self._show_label(text):
            parts.append(self._label(text, width))
        parts.append("</svg>")
        return "".join(parts)

    def _bars(self, pattern: str):
        o = self._opts
        x = o.margin_left
        for module in pattern:
            if module == "1":
                yield (f'<rect x="{x}" y="{o.margin_top}" width="{o.bar_width}" '
                       f'height="{o.bar_height}" fill="{o.foreground_color}"/>')
            x += o.bar_width

    def _label(self, text: str, width: int) -> str:
        o = self._opts
        y = o.margin_top + o.bar_height + o.text_margin + o.text_size
        return (f'<text x="{width // 2}" y="{y}" font-family="monospace" font-size="{o.text_size}" '
                f'text-anchor="middle" fill="{o.foreground_color}">{escape(_XML_INVALID.sub("", text))}</text>')

    @trace
    def render_to_file(self, pattern: str, path: str, text: str = "") -> str:
        """Render and write an .svg file.

        The parent directory must already exist and the file name may only
        use letters, digits, '_', '.', '-' and must end in '.svg'.

        Returns:
            The path as given.

        Raises:
            InvalidPath: parent directory missing or resolves through '..'.
            InvalidFilename: unsafe file name or wrong extension.
            WriteFailed: the SVG cannot be encoded or the write itself failed.
        """
        svg = self.render(pattern, text)

        target = Path(path)
        parent = target.parent
        try:
            resolved = parent.resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise InvalidPath(f"Invalid file path provided: {path}") from e
        if ".." in resolved.parts:
            raise InvalidPath(f"Invalid file path provided: {path}")

        if not _SAFE_FILENAME.fullmatch(target.name):
            raise InvalidFilename(f"Invalid filename format: {target.name!r}")

        if not resolved.is_dir():
            raise InvalidPath(f"Directory does not exist: {parent}")

        data = _encode(svg)
        try:
            with open(target, "wb") as fh:
                fh.write(data)
        except OSError as e:
            raise WriteFailed(f"Failed to save SVG file {path}: {e}") from e

        audit("svg.saved", logger=log, path=str(path), bytes=len(data))
        return path

    @trace
    def render_to_base64(self, pattern: str, text: str = "") -> str:
        """Render and wrap the SVG as a data:image/svg+xml;base64 URI.

        Raises:
            WriteFailed: the label holds characters UTF-8 cannot encode.
        """
        svg = self.render(pattern, text)
        return DATA_URI_PREFIX + base64.b64encode(_encode(svg)).decode("ascii")

    def set_bar_width(self, width: int) -> "SvgRenderer":
        """Non-int values fall back to the default, as in the constructor."""
        self._opts.bar_width = coerce_int("bar_width", width)
        return self

    def set_bar_height(self, height: int) -> "SvgRenderer":
        self._opts.bar_height = coerce_int("bar_height", height)
        return self

    def set_margins(self, left: int, right: int, top: int, bottom: int) -> "SvgRenderer":
        o = self._opts
        o.margin_left = coerce_int("margin_left", left)
        o.margin_right = coerce_int("margin_right", right)
        o.margin_top = coerce_int("margin_top", top)
        o.margin_bottom = coerce_int("margin_bottom", bottom)
        return self

    def set_colors(self, background: str, foreground: str) -> "SvgRenderer":
        """Set both colors; on InvalidColor neither is changed."""
        background = check_color(background, "background")
        foreground = check_color(foreground, "foreground")
        self._opts.background_color = background
        self._opts.foreground_color = foreground
        return self

    def set_show_text(self, show: bool) -> "SvgRenderer":
        self._opts.show_text = coerce_bool("show_text", show)
        return self
