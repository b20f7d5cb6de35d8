# -*- coding: utf-8 -*-

import enum
import multiprocessing
from typing import NamedTuple

from tqdm import tqdm

from tilecolors import MAX_COLORS

# --- Candidates ---
class Candidacy(enum.Enum):
    AVAILABLE = "available"
    TAKEN = "taken"
    END = "end"

class Candidate(NamedTuple):
    tile_id: int
    compat: int

def candidacy(candidate, available):
    """
    Classifies a candidate against the current claim state. Rows are sorted
    by descending score, so a score of 0 means nothing further can be used.
    """
    if candidate.compat == 0:
        return Candidacy.END
    if not available[candidate.tile_id]:
        return Candidacy.TAKEN
    return Candidacy.AVAILABLE

# --- Candidate Table ---
def build_candidate_row(tiles, row_idx):
    tile = tiles[row_idx]
    candidates = [Candidate(other_idx, tile.compat(other)) for other_idx, other in enumerate(tiles)]
    # list.sort is stable with reverse=True, ties keep enumeration order
    candidates.sort(key=lambda c: c.compat, reverse=True)
    return candidates

def _init_worker(tiles):
    global worker_tiles
    worker_tiles = tiles

def _build_row_worker(row_idx):
    return build_candidate_row(worker_tiles, row_idx)

def build_candidate_table(tiles, cores=1, show_progress=True):
    """
    Scores every tile against every other tile. Row i lists all tiles sorted
    by descending compatibility with tiles[i].
    """
    tiles_count = len(tiles)
    rows = range(tiles_count)

    if cores is None or cores <= 1 or tiles_count < 2:
        return [build_candidate_row(tiles, i) for i in tqdm(rows, desc="   Scoring tile pairs", leave=False, unit="tile", disable=not show_progress)]

    table = []
    chunksize = max(1, tiles_count // (cores * 16))
    with multiprocessing.Pool(processes=cores, initializer=_init_worker, initargs=(tiles,)) as pool:
        # imap keeps row order
        for row in tqdm(pool.imap(_build_row_worker, rows, chunksize=chunksize), total=tiles_count, desc="   Scoring tile pairs", leave=False, unit="tile", disable=not show_progress):
            table.append(row)
    return table

# --- Groups ---
class Group:
    """
    Tiles sharing one palette. Members are kept in the order they were added;
    the first one is the seed. The union of member colors never exceeds
    MAX_COLORS.
    """
    def __init__(self, seed):
        self.tiles = [seed]
        self._colors = set(seed.colors)

    @property
    def seed(self):
        return self.tiles[0]

    @property
    def colors(self):
        return frozenset(self._colors)

    @property
    def color_count(self):
        return len(self._colors)

    def try_add(self, tile):
        colors = self._colors | tile.colors
        if len(colors) > MAX_COLORS:
            return False

        self.tiles.append(tile)
        self._colors = colors
        return True

    def palette(self):
        return sorted(self._colors)

    def summary(self):
        return f"Group {{ Tiles: {len(self.tiles)}, Colors: {self.color_count} }}"

    def __len__(self):
        return len(self.tiles)

    def __iter__(self):
        return iter(self.tiles)

    def __repr__(self):
        return self.summary()

def form_groups(tiles, table, available=None, show_progress=True):
    """
    Greedy first-fit grouping. Each tile not yet claimed seeds a group, then
    walks its candidate row absorbing every available tile that keeps the
    group within MAX_COLORS. Absorbed tiles are claimed and can neither seed
    nor join another group.

    `available` holds one claim flag per tile (True = not yet absorbed) and is
    updated in place.
    """
    if available is None:
        available = [True] * len(tiles)

    groups = []
    for n, tile in enumerate(tqdm(tiles, desc="   Forming groups", leave=False, unit="tile", disable=not show_progress)):
        if not available[n]:
            continue

        # Claim the seed too, or a later seed could absorb it a second time.
        available[n] = False
        group = Group(tile)

        for candidate in table[n]:
            state = candidacy(candidate, available)
            if state is Candidacy.END:
                break
            if state is Candidacy.TAKEN:
                continue
            if group.try_add(tiles[candidate.tile_id]):
                available[candidate.tile_id] = False

        groups.append(group)

    return groups
