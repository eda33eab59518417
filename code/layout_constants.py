"""Shared constants for the BSP layout generator."""

from __future__ import annotations

# Split coordinates snap to multiples of this step so room edges line up on a coarse grid.
SPLIT_GRID_STEP = 10

# Doors never sit within this many cells of a room corner.
DOOR_CORNER_MARGIN = 2

# Door scans read the wall cell plus one further cell, so the outer wall needs two cells of slack.
MIN_FREE_SPACE_BUFFER = 2

# Both neighbouring rooms draw a wall inside the corridor band, so a corridor needs one free cell between them.
MIN_CORRIDOR_WIDTH = 3

DEFAULT_FREE_SPACE_BUFFER = 2
DEFAULT_CORRIDOR_WIDTH = 6
DEFAULT_MIN_ROOM_SIZE = 25
DEFAULT_ADJUSTED_MIN_ROOM_SIZE = 10
DEFAULT_SPLIT_CHANCE = 0.0
DEFAULT_MIN_ITERATIONS_BEFORE_CHANCE_APPLIES = 0

RANDOM_SEED = None  # Set to a number for reproducible behavior (for debugging); set to None to produce a different dungeon on every run.
