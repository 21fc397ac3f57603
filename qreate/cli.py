"""CLI entry point for QReate."""

import argparse
import logging
import os
import sys

from qreate import DEFAULT_CORNER_RADIUS, VIEWBOX_SIZE, __version__


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qreate",
        description="Render a QR code as a single rounded SVG path with decorative corners.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Save qr-example.com.svg in the current directory
  python -m qreate --url "https://example.com"

  # Sharper corners, explicit output path
  python -m qreate --url "https://example.com" --radius 4 -o codes/example.svg

  # Also write a PNG and check that it scans
  python -m qreate --url "https://example.com" --png example.png

  # Copy the SVG document to the clipboard instead of saving it
  python -m qreate --url "https://example.com" --copy
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    # Required
    parser.add_argument(
        "--url",
        required=True,
        help="URL or text to encode in the QR code",
    )

    # Optional — output
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output SVG path (default: derived from the URL, e.g. qr-example.com.svg)",
    )
    parser.add_argument(
        "--copy",
        action="store_true",
        help="Copy the SVG document to the clipboard instead of writing a file",
    )
    parser.add_argument(
        "--png",
        default=None,
        help="Also rasterize the QR code to this PNG path",
    )
    parser.add_argument(
        "--png-size",
        type=int,
        default=1000,
        help="PNG symbol size in pixels, quiet zone excluded. Default: 1000",
    )

    # Optional — rendering
    parser.add_argument(
        "--radius",
        type=float,
        default=DEFAULT_CORNER_RADIUS,
        help=f"Corner rounding radius in viewbox units (0 = sharp). Default: {DEFAULT_CORNER_RADIUS}",
    )
    parser.add_argument(
        "--size",
        type=int,
        default=VIEWBOX_SIZE,
        help=f"Width and height attributes of the SVG. Default: {VIEWBOX_SIZE}",
    )
    parser.add_argument(
        "--encoder",
        default="qrcode",
        choices=["qrcode", "segno"],
        help="QR encoder library. Default: qrcode",
    )

    # Flags
    parser.add_argument(
        "--no-verify",
        action="store_true",
        help="Skip scannability verification of the PNG output",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite output files without prompting",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def _confirm_overwrite(path: str, overwrite: bool) -> bool:
    if not os.path.exists(path) or overwrite:
        return True
    response = input(f"  Output file '{path}' already exists. Overwrite? [y/N] ")
    return response.lower() in ("y", "yes")


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.radius < 0:
        parser.error("--radius must not be negative")

    # Lazy imports for faster --help
    from qreate.export import (
        ClipboardError, VerifyResult, copy_svg_to_clipboard, export_filename,
        save_png, save_svg, verify_qr_scannable,
    )
    from qreate.pipeline import RenderOptions, generate_from_options

    print(f"QReate v{__version__}")
    print("=" * 50)

    options = RenderOptions(
        text=args.url,
        corner_radius=args.radius,
        encoder=args.encoder,
        display_size=args.size,
    )

    try:
        # Step 1: Encode and build geometry
        print(f"\n[1/2] Rendering QR code for: {args.url}")
        render = generate_from_options(options)
        print(f"  ✓ {render.module_count}x{render.module_count} modules, "
              f"{len(render.rects)} rectangles merged (radius {args.radius:g})")

        # Step 2: Export
        print(f"\n[2/2] Exporting")
        if args.copy:
            try:
                copy_svg_to_clipboard(render, options.display_size)
            except ClipboardError as e:
                print(f"\n  ERROR: {e}", file=sys.stderr)
                return 1
            print(f"  ✓ SVG copied to clipboard")
        else:
            output = args.output or export_filename(args.url)
            if not _confirm_overwrite(output, args.overwrite):
                print("  Aborted.")
                return 0
            save_svg(render, output, options.display_size)
            print(f"  ✓ Saved: {output}")

        if args.png:
            if not _confirm_overwrite(args.png, args.overwrite):
                print("  Skipped PNG.")
            else:
                save_png(render, args.png, size=args.png_size)
                print(f"  ✓ Saved: {args.png}")

                if not args.no_verify:
                    print(f"\n  Verifying QR code scannability...")
                    result, decoded = verify_qr_scannable(args.png)
                    if result == VerifyResult.SCANNABLE:
                        print(f"  ✓ QR code is SCANNABLE! Decoded: {decoded}")
                    elif result == VerifyResult.SKIPPED:
                        print(f"  ⊘ Verification skipped (pyzbar not installed)")
                        print(f"    Install with: pip install pyzbar")
                    else:
                        print(f"  ⚠️  WARNING: QR code may not be scannable.")
                        print(f"     Try decreasing --radius (current: {args.radius:g})")

        print(f"\n✅ Done!")
        return 0

    except (ValueError, FileNotFoundError) as e:
        print(f"\n  ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
