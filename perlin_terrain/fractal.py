"""
fractal.py
----------
Generates normalized heightmaps by summing octaves of Perlin noise
(fractal Brownian motion) over a pixel grid.

Purpose in Pipeline:
    - Step 3 in `main.py`: produces the HeightGrid that gets classified and saved.

How It Works:
    1. `accumulate_octaves()` evaluates every octave for every cell and stores
       the raw sums. Rows can be split across worker processes.
    2. `normalize()` needs the finished raw grid: it takes the global min/max
       and rescales every cell into [0, 1]. A flat grid becomes all zeros.

Inputs:
    - table: PermutationTable shared read-only by every evaluation.
    - width, height: grid size in cells.
    - scale, octaves, persistence, lacunarity: fractal parameters.
    - offset_x, offset_y: grid origin in cells, shifts the sampled window.

Outputs:
    - np.ndarray of shape (height, width), float64, indexed [y, x].

Example:
    heightmap = generate_heightmap(width=512, height=512, seed=42)
"""

from multiprocessing import Pool

import numpy as np

from perlin_terrain.config import TerrainConfig
from perlin_terrain.lattice_noise import evaluate_grid
from perlin_terrain.permutation import PermutationTable


def _accumulate_band(task):
    """
    Worker function.
    task: (table, row_start, row_stop, width, scale, octaves, persistence,
           lacunarity, offset_x, offset_y)
    """
    (table, row_start, row_stop, width, scale, octaves,
     persistence, lacunarity, offset_x, offset_y) = task

    xs = np.arange(width, dtype=np.float64) + offset_x
    ys = np.arange(row_start, row_stop, dtype=np.float64) + offset_y
    x, y = np.meshgrid(xs, ys)

    band = np.zeros((row_stop - row_start, width), dtype=np.float64)
    amplitude = 1.0
    frequency = 1.0
    for _ in range(octaves):
        band += evaluate_grid(x * scale * frequency, y * scale * frequency, table) * amplitude
        amplitude *= persistence
        frequency *= lacunarity
    return band


class FractalSynthesizer:
    """
    Two-stage heightmap synthesis: raw octave sums, then global normalization.
    """

    def __init__(
        self,
        table,
        width,
        height,
        scale,
        octaves,
        persistence,
        lacunarity,
        offset_x=0.0,
        offset_y=0.0,
        workers=1,
    ):
        self.table = table
        self.width = width
        self.height = height
        self.scale = scale
        self.octaves = octaves
        self.persistence = persistence
        self.lacunarity = lacunarity
        self.offset_x = offset_x
        self.offset_y = offset_y
        self.workers = workers
        self.raw_heightmap = None
        self.heightmap = None

    def _tasks(self, bands):
        edges = np.linspace(0, self.height, bands + 1).astype(int)
        return [
            (self.table, int(start), int(stop), self.width, self.scale, self.octaves,
             self.persistence, self.lacunarity, self.offset_x, self.offset_y)
            for start, stop in zip(edges[:-1], edges[1:])
            if stop > start
        ]

    # === Stage 1: raw octave sums ===
    def accumulate_octaves(self):
        """
        Evaluates every octave for every cell.

        Returns:
            np.ndarray: Raw heights of shape (height, width), unbounded.
        """
        self.heightmap = None
        workers = min(self.workers, self.height)

        if workers <= 1:
            raw = _accumulate_band(self._tasks(1)[0])
        else:
            # Each worker fills its own rows; map() returns once all are done.
            with Pool(processes=workers) as pool:
                raw = np.vstack(pool.map(_accumulate_band, self._tasks(workers)))

        self.raw_heightmap = raw
        return raw

    # === Stage 2: global min/max rescale ===
    def normalize(self):
        """
        Rescales the raw grid into [0, 1] using its global min and max.

        Returns:
            np.ndarray: Normalized heights; all zeros when the grid is flat.
        """
        if self.raw_heightmap is None:
            raise ValueError("Raw heightmap not generated yet. Call accumulate_octaves() first.")

        raw = self.raw_heightmap
        min_val = raw.min()
        max_val = raw.max()
        with np.errstate(over="ignore", invalid="ignore"):
            span = max_val - min_val
        if not np.isfinite(span):
            raise ValueError(f"Raw height range [{min_val}, {max_val}] is not finite; lower persistence.")
        if span > 0:
            norm_map = np.clip((raw - min_val) / span, 0.0, 1.0)
        else:
            norm_map = np.zeros_like(raw)

        self.heightmap = norm_map
        return norm_map

    def synthesize(self):
        self.accumulate_octaves()
        return self.normalize()


def generate_from_config(config, table=None):
    """
    Validates `config` and synthesizes its normalized heightmap.

    Args:
        config (TerrainConfig): Run settings.
        table (PermutationTable or None): Explicit table; built from
            `config.seed` when omitted.

    Returns:
        np.ndarray: Normalized heightmap of shape (height, width).
    """
    config.validate()
    if table is None:
        table = PermutationTable.build(config.seed)

    synthesizer = FractalSynthesizer(
        table,
        config.width,
        config.height,
        config.scale,
        config.octaves,
        config.persistence,
        config.lacunarity,
        offset_x=config.offset_x,
        offset_y=config.offset_y,
        workers=config.workers,
    )
    return synthesizer.synthesize()


def generate_heightmap(
    width=512,
    height=512,
    scale=0.01,
    octaves=4,
    persistence=0.5,
    lacunarity=2.0,
    seed=None,
    offset_x=0.0,
    offset_y=0.0,
    workers=1,
):
    """Builds a table from `seed` and returns the normalized heightmap."""
    config = TerrainConfig(
        width=width,
        height=height,
        scale=scale,
        octaves=octaves,
        persistence=persistence,
        lacunarity=lacunarity,
        seed=seed,
        offset_x=offset_x,
        offset_y=offset_y,
        workers=workers,
    )
    return generate_from_config(config)
