"""
Main entry point for the Bubble Chart Renderer.
Renders JSON word lists into packed bubble chart images.
"""

import argparse
import os
import sys
import time
from typing import List, Optional, Tuple

from bubble_layout import BubbleLayoutEngine
from bubble_visualizer import BubbleVisualizer
from chart_data import load_items
from config import FONT_CONFIG, OUTPUT_CONFIG
from glyph_fitter import FontManager, split_font_family


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Bubble Chart Renderer - Render scored words as packed bubble charts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Input files hold a JSON list of records such as:
  [{"word": "fox", "score": 12, "group": "noun"}, ...]

Examples:
  # Render a chart into the current directory (words.output.png, words.output.json)
  python main.py words.json

  # Render several charts into a destination directory
  python main.py --dest charts/ first.json second.json

  # Use a custom font file for the labels
  python main.py --font-file SawarabiGothic-Regular.ttf --font-family "Sawarabi Gothic" words.json

  # Smaller canvas with a different seed
  python main.py --size 800 --seed 7 words.json
""",
    )

    parser.add_argument("filenames", nargs="+", help="JSON files with word records")

    # Output options
    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "--dest", default=".", help="Directory for the rendered files (default: .)"
    )
    output_group.add_argument(
        "--quiet", "-q", action="store_true", help="Minimal output"
    )

    # Layout options
    layout_group = parser.add_argument_group("Layout Options")
    layout_group.add_argument(
        "--min-radius", type=float, help="Radius for the lowest score"
    )
    layout_group.add_argument(
        "--max-radius", type=float, help="Radius for the highest score"
    )
    layout_group.add_argument(
        "--size", type=float, help="Chart size in pixels, excluding margins"
    )
    layout_group.add_argument("--steps", type=int, help="Relaxation steps")
    layout_group.add_argument(
        "--collision-iterations", type=int, help="Collision passes per step"
    )
    layout_group.add_argument(
        "--repulsion", type=float, help="Many-body strength (negative attracts)"
    )
    layout_group.add_argument("--seed", type=int, help="Seed for the initial scatter")

    # Font options
    font_group = parser.add_argument_group("Font Options")
    font_group.add_argument(
        "--font-family",
        default=FONT_CONFIG["font_family"],
        help="CSS-style font family list for labels",
    )
    font_group.add_argument(
        "--font-weight", default=FONT_CONFIG["font_weight"], help="Font weight"
    )
    font_group.add_argument(
        "--font-file",
        help="TTF/OTF file registered under the first name in --font-family",
    )

    return parser.parse_args(argv)


def build_visualizer(args) -> BubbleVisualizer:
    """Create the visualizer described by the command line options."""
    font_manager = FontManager()
    if args.font_file:
        families = split_font_family(args.font_family)
        if not families:
            raise ValueError("--font-file needs a family name in --font-family")
        font_manager.register_font(args.font_file, families[0], args.font_weight)

    layout_engine = BubbleLayoutEngine(
        min_radius=args.min_radius,
        max_radius=args.max_radius,
        viewport_size=args.size,
        step_count=args.steps,
        collision_iterations=args.collision_iterations,
        repulsion_strength=args.repulsion,
        seed=args.seed,
    )

    return BubbleVisualizer(
        layout_engine=layout_engine,
        font_manager=font_manager,
        font_family=args.font_family,
        font_weight=args.font_weight,
    )


def output_paths(filename: str, dest: str) -> Tuple[str, str]:
    """PNG and JSON output paths for an input file."""
    basename = os.path.basename(filename)
    if basename.endswith(".json"):
        basename = basename[: -len(".json")]
    return (
        os.path.join(dest, f"{basename}.output.png"),
        os.path.join(dest, f"{basename}.output.json"),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    if args.quiet:
        OUTPUT_CONFIG["verbose"] = False
        OUTPUT_CONFIG["timing_info"] = False

    try:
        visualizer = build_visualizer(args)
    except (ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1

    os.makedirs(args.dest, exist_ok=True)

    failures = 0
    for filename in args.filenames:
        png_path, json_path = output_paths(filename, args.dest)
        start_time = time.time()

        if OUTPUT_CONFIG["verbose"]:
            print(f"Rendering {filename}...")

        try:
            items = load_items(filename)
            visualizer.create_bubble_chart(items, png_path, json_path)
        except Exception as e:
            print(f"Error rendering {filename}: {e}")
            failures += 1
            continue

        if OUTPUT_CONFIG["timing_info"]:
            elapsed = round(time.time() - start_time, 2)
            print(f"Completed {filename} in {elapsed} seconds")

    if failures:
        print(f"Failed to render {failures} of {len(args.filenames)} files")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
