"""High-level barcode service: one encoder plus per-call SVG renderers."""

from barx.code128 import Code128Generator
from barx.config import RenderOptions
from barx.logging import get_logger, trace
from barx.svg import SvgRenderer

log = get_logger("barcode")


class Barcode:
    """Encode text and render it in one call.

    The service owns a single Code128Generator. Every SVG call builds its own
    SvgRenderer from the service defaults overlaid with the call's options,
    so calls never leak configuration into each other.

    Args:
        generator: Encoder to use (a fresh Code128Generator if omitted).
        defaults: Render options applied to every call, e.g. the result of
            barx.config.load_options().
    """

    def __init__(self, generator: Code128Generator | None = None, defaults=None):
        self.generator = generator or Code128Generator()
        if isinstance(defaults, RenderOptions):
            self.defaults = defaults
        else:
            self.defaults = RenderOptions.from_mapping(defaults)

    def _renderer(self, options=None) -> SvgRenderer:
        return SvgRenderer(self.defaults.merged(options))

    def generate(self, code: str) -> str:
        """Binary bar pattern for code."""
        return self.generator.generate(code)

    def get_binary_pattern(self, code: str) -> str:
        return self.generator.generate(code)

    def validate_code(self, code: str) -> bool:
        return self.generator.validate_data(code)

    @trace
    def generate_svg(self, code: str, text: str = "", options=None) -> str:
        """SVG markup for code, labelled with text (or the code itself when text is empty)."""
        pattern = self.generator.generate(code)
        return self._renderer(options).render(pattern, text or code)

    @trace
    def generate_svg_file(self, code: str, filename: str, options=None) -> str:
        pattern = self.generator.generate(code)
        return self._renderer(options).render_to_file(pattern, filename, code)

    @trace
    def generate_svg_base64(self, code: str, options=None) -> str:
        pattern = self.generator.generate(code)
        return self._renderer(options).render_to_base64(pattern, code)

    def generate_with_options(self, code: str, width: int = 2, height: int = 60) -> str:
        """Data URI for code with the given bar width and height."""
        return self.generate_svg_base64(code, {"bar_width": width, "bar_height": height})
