#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# --- Program Identification ---
APP_VERSION = "<unreleased>"
SCRIPT_NAME = "Tile Group Forge"
SCRIPT_VERSION = APP_VERSION

# --- Imports ---
import os
import sys
import shutil
import argparse
import numpy as np
from PIL import Image
from tqdm import tqdm

from tilecolors import TILE_SIZE, MAX_COLORS, format_color, load_image, create_tiles
from tilegroups import build_candidate_table, form_groups

SHEET_TILES_PER_ROW = 16

# --- Splash Screen ---
def print_splash_screen(script_name, script_version):
    COLOR_BLUE_DARK = '\033[34m'
    COLOR_BLUE_BRIGHT = '\033[94m'
    COLOR_ORANGE_DARK = '\033[33m'
    COLOR_ORANGE_BRIGHT = '\033[93m'
    COLOR_TITLE = '\033[1;97m'
    COLOR_VERSION = '\033[97m'
    COLOR_RESET = '\033[0m'

    if not sys.stdout.isatty():
        COLOR_BLUE_DARK = COLOR_BLUE_BRIGHT = COLOR_ORANGE_DARK = ""
        COLOR_ORANGE_BRIGHT = COLOR_TITLE = COLOR_VERSION = COLOR_RESET = ""

    block_char = "\u2588" * 2
    b_dark = f"{COLOR_BLUE_DARK}{block_char}{COLOR_RESET}"
    b_bright = f"{COLOR_BLUE_BRIGHT}{block_char}{COLOR_RESET}"
    o_dark = f"{COLOR_ORANGE_DARK}{block_char}{COLOR_RESET}"
    o_bright = f"{COLOR_ORANGE_BRIGHT}{block_char}{COLOR_RESET}"

    # Four tiles, two palettes
    logo_lines = [
        f"{b_dark}{b_bright}{o_dark}{o_bright}",
        f"{b_bright}{b_dark}{o_bright}{o_dark}",
        f"{o_dark}{o_bright}{b_dark}{b_bright}",
        f"{o_bright}{o_dark}{b_bright}{b_dark}"
    ]

    text_lines = [
        f"{COLOR_TITLE}{script_name}{COLOR_RESET} (v{script_version})",
        f"{COLOR_VERSION}{TILE_SIZE}x{TILE_SIZE} tiles, {MAX_COLORS} colors per group{COLOR_RESET}"
    ]

    print()
    print(f"{logo_lines[0]}")
    print(f"{logo_lines[1]}  {text_lines[0]}")
    print(f"{logo_lines[2]}  {text_lines[1]}")
    print(f"{logo_lines[3]}")
    print("-" * 60)

# --- Output ---
def describe_group(group):
    palette = ", ".join(format_color(c) for c in group.palette())
    return f"{group.summary()}\nPalette: {palette}\n"

def build_group_sheet(group) -> Image.Image:
    num_tiles = len(group)
    cols = min(num_tiles, SHEET_TILES_PER_ROW)
    rows = (num_tiles + SHEET_TILES_PER_ROW - 1) // SHEET_TILES_PER_ROW
    sheet = np.zeros((rows * TILE_SIZE, cols * TILE_SIZE, 4), dtype=np.uint8)
    for i, tile in enumerate(group):
        r, c = divmod(i, SHEET_TILES_PER_ROW)
        sheet[r*TILE_SIZE:(r+1)*TILE_SIZE, c*TILE_SIZE:(c+1)*TILE_SIZE] = tile.pixels
    return Image.fromarray(sheet)

def create_output(groups, output_dir, sheets=True, show_progress=True):
    shutil.rmtree(output_dir, ignore_errors=True)
    os.makedirs(output_dir)

    for group_id, group in enumerate(tqdm(groups, desc="   Writing groups", leave=False, unit="group", disable=not show_progress)):
        group_dir = os.path.join(output_dir, str(group_id))
        os.makedirs(group_dir)

        with open(os.path.join(group_dir, "_group.txt"), "w", encoding="utf-8") as f:
            f.write(describe_group(group))

        for tile_id, tile in enumerate(group):
            Image.fromarray(np.ascontiguousarray(tile.pixels)).save(os.path.join(group_dir, f"{tile_id}.png"))

        if sheets:
            build_group_sheet(group).save(os.path.join(group_dir, "_sheet.png"))

def main(argv=None):
    print_splash_screen(SCRIPT_NAME, SCRIPT_VERSION)

    parser = argparse.ArgumentParser(
        description=f"Groups the {TILE_SIZE}x{TILE_SIZE} tiles of an image into sets sharing a {MAX_COLORS}-color palette.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument("input_image", help="Input image file path. Dimensions must be multiples of the tile size.")
    parser.add_argument("--output-dir", default="output", help="Directory for output files (defaults to 'output').\nAny existing contents are removed.")
    parser.add_argument("--cores", type=int, default=os.cpu_count(), help="Number of CPU cores used to score tile pairs. Defaults to all.")
    parser.add_argument("--no-sheets", action="store_true", help="Skip writing a combined '_sheet.png' for every group.")

    args = parser.parse_args(argv)

    # --- 1. Load image and extract tiles ---
    print("1. Loading image and extracting tiles...")
    try:
        image = load_image(args.input_image)
    except FileNotFoundError:
        print(f"Error: Input image '{args.input_image}' not found.")
        sys.exit(1)
    except OSError as e:
        print(f"Error: Failed to open image: {e}")
        sys.exit(1)

    try:
        tiles = create_tiles(image)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    width, height = image.size
    print(f"   [INFO] Image is {width}x{height}, {(width // TILE_SIZE) * (height // TILE_SIZE)} tiles in total.")
    print(f"   [INFO] Found {len(tiles)} non-empty tiles.")

    # --- 2. Score tile pairs ---
    print(f"2. Scoring {len(tiles) * len(tiles)} tile pairs on {args.cores} cores...")
    table = build_candidate_table(tiles, cores=args.cores)

    # --- 3. Form groups ---
    print("3. Forming palette groups...")
    groups = form_groups(tiles, table)
    print(f"   [INFO] Formed {len(groups)} groups.")

    # --- 4. Generate output files ---
    print(f"4. Writing groups to '{args.output_dir}'...")
    create_output(groups, args.output_dir, sheets=not args.no_sheets)

    print("\nProcessing complete.")

if __name__ == "__main__":
    main()
