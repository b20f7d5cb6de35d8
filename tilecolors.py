# -*- coding: utf-8 -*-

import numpy as np
from PIL import Image

# --- Constants ---
TILE_SIZE = 16
MAX_COLORS = 16

EMPTY_COLOR = 0
OPAQUE_FLAG = 1 << 24

# --- Color Identity Functions ---
def pack_color(rgba):
    r, g, b, alpha = (int(c) for c in rgba)
    if alpha == 0:
        return EMPTY_COLOR
    if alpha == 255:
        return OPAQUE_FLAG + (r << 16) + (g << 8) + b
    raise ValueError(f"Semitransparent pixel found (alpha={alpha}).")

def pack_pixels(pixels: np.ndarray) -> np.ndarray:
    """
    Vectorized pack_color over an (h, w, 4) RGBA array.
    Returns an (h, w) uint32 array of color identities.
    """
    alpha = pixels[..., 3]
    partial = (alpha != 0) & (alpha != 255)
    if np.any(partial):
        y, x = np.argwhere(partial)[0]
        raise ValueError(f"Semitransparent pixel found at ({x}, {y}) (alpha={alpha[y, x]}).")

    rgb = pixels[..., :3].astype(np.uint32)
    packed = OPAQUE_FLAG + (rgb[..., 0] << 16) + (rgb[..., 1] << 8) + rgb[..., 2]
    return np.where(alpha == 255, packed, EMPTY_COLOR).astype(np.uint32)

def unpack_color(color):
    if color == EMPTY_COLOR:
        return None
    return ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)

def format_color(color):
    if color == EMPTY_COLOR:
        return "(empty)"
    # Drop the leading opaque marker digit
    return format(color, "x")[1:]

# --- Tile ---
class Tile:
    """
    A TILE_SIZE x TILE_SIZE cell of the source image and the set of distinct
    colors found in it. Two tiles are equal when they sit at the same grid
    coordinates.
    """
    def __init__(self, pixels: np.ndarray, coords):
        self.coords = (int(coords[0]), int(coords[1]))
        self.pixels = pixels
        self.pixels.flags.writeable = False
        self.colors = frozenset(int(c) for c in np.unique(pack_pixels(pixels)))

        if len(self.colors) > MAX_COLORS:
            raise ValueError(f"Tile at {self.coords} has more than {MAX_COLORS} colours.")

    def is_empty(self):
        return self.colors == {EMPTY_COLOR}

    def compat(self, other):
        """
        Number of colors shared with `other`, or 0 when both are the same tile
        or their combined palette would not fit in MAX_COLORS.
        """
        if self == other:
            return 0

        total_colors = len(self.colors | other.colors)
        if total_colors > MAX_COLORS:
            return 0

        return len(self.colors & other.colors)

    def __eq__(self, other):
        if not isinstance(other, Tile):
            return NotImplemented
        return self.coords == other.coords

    def __hash__(self):
        return hash(self.coords)

    def __repr__(self):
        return f"Tile(coords={self.coords}, colors={len(self.colors)})"

# --- Image Tiling ---
def load_image(path) -> Image.Image:
    with Image.open(path) as image:
        return image.convert("RGBA")

def get_tile_dimensions(image: Image.Image):
    width, height = image.size
    if width % TILE_SIZE != 0 or height % TILE_SIZE != 0:
        raise ValueError(f"Image dimensions must be multiples of {TILE_SIZE}, got {(width, height)}")
    return width // TILE_SIZE, height // TILE_SIZE

def create_tiles(image: Image.Image):
    """
    Splits the image into tiles, walking the grid column by column, and
    returns the non-empty ones in that order.
    """
    tiles_w, tiles_h = get_tile_dimensions(image)
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    pixels = np.array(image, dtype=np.uint8)

    tiles = []
    for x in range(tiles_w):
        for y in range(tiles_h):
            view = pixels[y*TILE_SIZE:(y+1)*TILE_SIZE, x*TILE_SIZE:(x+1)*TILE_SIZE]
            tile = Tile(view, (x, y))
            if tile.is_empty():
                continue
            tiles.append(tile)

    return tiles
