"""BAR-X CLI: encode, render and verify Code 128 barcodes from the command line."""

import argparse
import sys

from barx.errors import BarxError
from barx.logging import audit, get_logger, setup_logging

log = get_logger("cli")


def _options(args) -> dict:
    """Render option overrides given on the command line."""
    overrides = {
        "bar_width": args.bar_width,
        "bar_height": args.bar_height,
        "background_color": args.bg,
        "foreground_color": args.fg,
    }
    if args.no_text:
        overrides["show_text"] = False
    return {k: v for k, v in overrides.items() if v is not None}


def _service(args):
    from barx.barcode import Barcode
    from barx.config import load_options

    defaults = load_options(args.config) if args.config else None
    return Barcode(defaults=defaults)


def cmd_pattern(args):
    """Print the binary pattern."""
    from barx.code128 import generate, pattern_width

    pattern = generate(args.text)
    print(pattern)
    print(f"Modules: {pattern_width(pattern)}", file=sys.stderr)


def cmd_svg(args):
    """Write an SVG file."""
    barcode = _service(args)
    options = _options(args)
    if args.label:
        from barx.svg import SvgRenderer

        pattern = barcode.generate(args.text)
        renderer = SvgRenderer(barcode.defaults.merged(options))
        path = renderer.render_to_file(pattern, args.output, args.label)
    else:
        path = barcode.generate_svg_file(args.text, args.output, options)
    print(f"Saved: {path}")


def cmd_base64(args):
    """Print a data URI."""
    print(_service(args).generate_svg_base64(args.text, _options(args)))


def cmd_validate(args):
    """Check whether each text can be encoded."""
    from barx.code128 import validate_data

    all_valid = True
    for text in args.texts:
        ok = validate_data(text)
        all_valid = all_valid and ok
        print(f"  {'VALID  ' if ok else 'INVALID'} {text!r}")
    sys.exit(0 if all_valid else 1)


def cmd_verify(args):
    """Encode, rasterize in memory and decode with ZBar."""
    from barx.code128 import generate
    from barx.verify import stress_test, verify

    if args.stress:
        result = stress_test(generate(args.text), expected=args.text)
        print(result.summary())
        sys.exit(0 if result.original.success else 1)

    r = verify(args.text)
    status = "PASS" if r.success else "FAIL"
    print(f"  [{r.decoder:12s}] {status} | {r.decode_time_ms:6.1f}ms | {r.decoded_data or r.error}")
    sys.exit(0 if r.success else 1)


def _add_render_args(p):
    p.add_argument("--config", default=None, help="JSON file with render option defaults")
    p.add_argument("--bar-width", type=int, default=None, help="Pixels per module (1-50)")
    p.add_argument("--bar-height", type=int, default=None, help="Bar height in pixels (10-500)")
    p.add_argument("--bg", default=None, help="Background color (#RGB, #RRGGBB or name)")
    p.add_argument("--fg", default=None, help="Bar and label color")
    p.add_argument("--no-text", action="store_true", help="Omit the text label")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="barx", description="BAR-X: Code 128 barcode toolchain")

    # Global logging flags
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- pattern ---
    p_pat = subparsers.add_parser("pattern", help="Print the binary bar pattern")
    p_pat.add_argument("text", help="Text to encode (ASCII, max 48 chars)")

    # --- svg ---
    p_svg = subparsers.add_parser("svg", help="Write the barcode as an SVG file")
    p_svg.add_argument("text", help="Text to encode")
    p_svg.add_argument("-o", "--output", default="barcode.svg", help="Output .svg path (directory must exist)")
    p_svg.add_argument("--label", default=None, help="Label text (defaults to the encoded text)")
    _add_render_args(p_svg)

    # --- base64 ---
    p_b64 = subparsers.add_parser("base64", help="Print the SVG as a data URI")
    p_b64.add_argument("text", help="Text to encode")
    _add_render_args(p_b64)

    # --- validate ---
    p_val = subparsers.add_parser("validate", help="Check whether texts can be encoded")
    p_val.add_argument("texts", nargs="+", help="Texts to check")

    # --- verify ---
    p_ver = subparsers.add_parser("verify", help="Check that the barcode scans back")
    p_ver.add_argument("text", help="Text to encode")
    p_ver.add_argument("--stress", action="store_true", help="Also scan blurred/dimmed/occluded variants")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging before any command runs
    level = "DEBUG" if args.verbose else "INFO"
    setup_logging(level=level, log_file=args.log_file)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "pattern": cmd_pattern,
        "svg": cmd_svg,
        "base64": cmd_base64,
        "validate": cmd_validate,
        "verify": cmd_verify,
    }
    try:
        commands[args.command](args)
    except BarxError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)
    audit("cli.done", logger=log, command=args.command)


if __name__ == "__main__":
    main()
