#!/usr/bin/env python3
"""
Sprite Packer - Desktop Application
Packs a folder of sprite images into a single texture atlas.

Run without arguments to start the GUI, or pass --folder and --output
to export an atlas from the command line.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add current directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

from spritepacker_core import AtlasConfig, InvalidConfigError, SortMethod, scan_folder, sort_entries, pack
from spritepacker_core.logger import setup_logging, generate_log_filename
from spritepacker_core.renderer import AtlasRenderer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pack sprite images into a texture atlas.")
    parser.add_argument("--folder", type=Path, help="Folder containing sprite images")
    parser.add_argument("--output", type=Path, help="Output PNG path")
    parser.add_argument("--size", default="1024x1024", help="Atlas size as WIDTHxHEIGHT (default: 1024x1024)")
    parser.add_argument("--padding", type=int, default=0, help="Padding around each sprite in pixels")
    parser.add_argument("--sort", default=SortMethod.NAME_ASC.value,
                        choices=[m.value for m in SortMethod if m is not SortMethod.CUSTOM],
                        help="Sorting method applied before packing")
    parser.add_argument("--compress-level", type=int, default=6, choices=range(10),
                        metavar="0-9", help="PNG compression level")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def run_headless(args: argparse.Namespace) -> int:
    """Scan, sort, pack and save an atlas without the GUI."""
    try:
        config = AtlasConfig.from_size_string(args.size, args.padding, SortMethod.parse(args.sort))
    except InvalidConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        entries = scan_folder(args.folder, max_workers=4)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = pack(sort_entries(entries, config.sort_method), config)
    if not result.placed:
        print("Error: No images were packed into the atlas", file=sys.stderr)
        return 1

    log_path = args.output.parent / generate_log_filename(args.output.stem)
    AtlasRenderer().save_atlas(result, args.output, compress_level=args.compress_level,
                               log_path=log_path, project_name=args.output.stem,
                               sort_method=config.sort_method.value)

    print(f"Placed {len(result.placed)} of {result.total} images into {config.size_label} atlas")
    for identifier in result.rejected:
        print(f"  rejected: {identifier}")
    print(f"Atlas saved to: {args.output}")
    return 0


def main(argv=None) -> int:
    """Main entry point for Sprite Packer."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.folder or args.output:
        if not (args.folder and args.output):
            parser.error("--folder and --output must be given together")
        setup_logging(logging.DEBUG if args.verbose else logging.INFO)
        return run_headless(args)

    import tkinter as tk
    from spritepacker_core.gui import SpritePackerGUI

    root = tk.Tk()
    app = SpritePackerGUI(root)
    root.mainloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
