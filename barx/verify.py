"""Scan-verify: rasterize bar patterns in memory and decode them with ZBar."""

import time
from dataclasses import dataclass, field

import numpy as np
from PIL import Image, ImageDraw, ImageEnhance, ImageFilter
from pyzbar.pyzbar import ZBarSymbol
from pyzbar.pyzbar import decode as pyzbar_decode

from barx.code128 import generate
from barx.logging import audit, get_logger, trace

log = get_logger("verify")

DECODER = "pyzbar/zbar"


@dataclass
class ScanResult:
    """Result of a single scan attempt."""
    success: bool
    decoded_data: str | None = None
    decode_time_ms: float = 0.0
    decoder: str = DECODER
    error: str | None = None


@dataclass
class StressTestResult:
    """Result of a stress test battery on one pattern."""
    original: ScanResult = field(default_factory=lambda: ScanResult(success=False))
    variants: dict[str, ScanResult] = field(default_factory=dict)

    @property
    def total_tests(self) -> int:
        return 1 + len(self.variants)

    @property
    def total_passed(self) -> int:
        passed = sum(1 for r in self.variants.values() if r.success)
        return passed + (1 if self.original.success else 0)

    @property
    def pass_rate(self) -> float:
        return self.total_passed / self.total_tests

    def summary(self) -> str:
        lines = [
            f"Stress Test Summary: {self.total_passed}/{self.total_tests} passed ({self.pass_rate:.1%})",
            f"  {'original':20s}: {'PASS' if self.original.success else 'FAIL'} ({self.original.decode_time_ms:.1f}ms)",
        ]
        for name, r in self.variants.items():
            status = "PASS" if r.success else "FAIL"
            lines.append(f"  {name:20s}: {status} ({r.decode_time_ms:.1f}ms)")
        return "\n".join(lines)


@trace
def rasterize(pattern: str, module_px: int = 3, height_px: int = 80, quiet_zone: int = 10) -> Image.Image:
    """Draw a pattern as a grayscale image (bars black, spaces white).

    Args:
        pattern: '0'/'1' module string from code128.generate.
        module_px: Pixel width of one module.
        height_px: Bar height in pixels.
        quiet_zone: White margin on each side, in modules.
    """
    if module_px < 1 or height_px < 1 or quiet_zone < 0:
        raise ValueError("module_px and height_px must be >= 1, quiet_zone >= 0")

    bars = np.frombuffer(pattern.encode("ascii"), dtype=np.uint8) == ord("1")
    row = np.where(bars, 0, 255).astype(np.uint8)
    row = np.pad(row, quiet_zone, constant_values=255)
    row = np.repeat(row, module_px)
    return Image.fromarray(np.tile(row, (height_px, 1)))


def _check_expected(result: ScanResult, expected: str | None) -> ScanResult:
    if result.success and expected is not None and result.decoded_data != expected:
        result.success = False
        result.error = f"Data mismatch: got '{result.decoded_data}', expected '{expected}'"
    return result


@trace
def scan(image: Image.Image) -> ScanResult:
    """Decode the first Code 128 symbol found in image.

    Decoder failures are reported in the result, never raised.
    """
    start = time.perf_counter()
    try:
        results = pyzbar_decode(image, symbols=[ZBarSymbol.CODE128])
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        audit("scan.error", logger=log, decoder=DECODER, error=str(e), time_ms=round(elapsed, 1))
        return ScanResult(success=False, decode_time_ms=elapsed, error=str(e))

    elapsed = (time.perf_counter() - start) * 1000
    if not results:
        audit("scan.verified", logger=log, decoder=DECODER, success=False, time_ms=round(elapsed, 1))
        return ScanResult(success=False, decode_time_ms=elapsed, error="No Code 128 symbol detected")

    data = results[0].data.decode("ascii", errors="replace")
    audit("scan.verified", logger=log, decoder=DECODER, success=True, time_ms=round(elapsed, 1), data=data)
    return ScanResult(success=True, decoded_data=data, decode_time_ms=elapsed)


@trace
def verify(data: str, expected: str | None = None) -> ScanResult:
    """Encode data, rasterize it and check that ZBar reads it back.

    Args:
        data: Text to encode.
        expected: Text the scan must return (defaults to data).

    Raises:
        InvalidInput: data cannot be encoded.
    """
    image = rasterize(generate(data))
    return _check_expected(scan(image), data if expected is None else expected)


def apply_blur(image: Image.Image, radius: float) -> Image.Image:
    return image.filter(ImageFilter.GaussianBlur(radius=radius))


def apply_brightness(image: Image.Image, factor: float) -> Image.Image:
    """factor=1.0 is original, <1 darker, >1 brighter."""
    return ImageEnhance.Brightness(image).enhance(factor)


def apply_band(image: Image.Image, coverage: float = 0.3) -> Image.Image:
    """Blank a full-width band over the top of the bars."""
    img = image.copy()
    w, h = img.size
    ImageDraw.Draw(img).rectangle([0, 0, w, int(h * coverage)], fill=255)
    return img


@trace
def stress_test(pattern: str, expected: str | None = None) -> StressTestResult:
    """Scan a pattern under blur, brightness and partial-occlusion variants.

    Tests:
        - Gaussian blur: radius 0.5, 1
        - Brightness: 0.6 (dim), 1.5 (bright)
        - Band occlusion: top 30%, top 60%
    """
    image = rasterize(pattern)
    result = StressTestResult(original=_check_expected(scan(image), expected))

    variants = {}
    for radius in (0.5, 1):
        variants[f"blur radius={radius}"] = apply_blur(image, radius)
    for factor in (0.6, 1.5):
        variants[f"brightness={factor}"] = apply_brightness(image, factor)
    for coverage in (0.3, 0.6):
        variants[f"band {coverage:.0%}"] = apply_band(image, coverage)

    for name, variant in variants.items():
        result.variants[name] = _check_expected(scan(variant), expected)

    audit("stress.completed", logger=log,
          pass_rate=f"{result.pass_rate:.1%}",
          passed=result.total_passed,
          total=result.total_tests)
    return result
