"""Exception types raised by the BAR-X encoder, renderer and configuration layer."""


class BarxError(Exception):
    """Base class for every error raised by barx."""


class InvalidInput(BarxError, ValueError):
    """Text cannot be encoded as Code 128 (empty, too long, non-ASCII, unsupported character)."""


class InvalidColor(BarxError, ValueError):
    """Color is neither #RGB / #RRGGBB hex nor an accepted color name."""


class ConfigError(BarxError):
    """Render options file is missing or malformed."""


class RenderError(BarxError):
    """Rendering refused because an input or the output would exceed a size cap."""


class PatternTooLarge(RenderError):
    pass


class TextTooLong(RenderError):
    pass


class ImageTooLarge(RenderError):
    pass


class OutputError(BarxError):
    """The rendered SVG could not be written to the requested location."""


class InvalidPath(OutputError):
    pass


class InvalidFilename(OutputError):
    pass


class WriteFailed(OutputError):
    pass
