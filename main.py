"""
Main entry point for Perlin noise terrain generation.

Pipeline Overview:
    1. Parse CLI arguments into a validated TerrainConfig.
    2. Build the permutation table from the seed.
    3. Synthesize the fractal heightmap and normalize it into [0, 1].
    4. Classify every cell into an elevation band color.
    5. Save the color raster (and optionally a grayscale preview / raw .npy).

Example:
    python main.py --seed 36 --octaves 6 --output output/terrain.png
"""

import argparse
import time

from perlin_terrain import config as C
from perlin_terrain.color_classifier import ColorClassifier
from perlin_terrain.config import ConfigurationError, TerrainConfig
from perlin_terrain.fractal import FractalSynthesizer
from perlin_terrain.image_emitter import ImageEmitter
from perlin_terrain.permutation import PermutationTable


def build_parser():
    parser = argparse.ArgumentParser(description="Perlin Noise Terrain Generation")
    # Grid
    parser.add_argument("--width", type=int, default=C.WIDTH, help="grid width in pixels")
    parser.add_argument("--height", type=int, default=C.HEIGHT, help="grid height in pixels")
    parser.add_argument(
        "--offset-x", type=float, default=0.0, help="grid origin in pixels along x"
    )
    parser.add_argument(
        "--offset-y", type=float, default=0.0, help="grid origin in pixels along y"
    )
    # Noise parameters
    parser.add_argument(
        "--scale", type=float, default=C.SCALE, help="spatial frequency (smaller = larger features)"
    )
    parser.add_argument("--octaves", type=int, default=C.OCTAVES, help="number of fractal layers")
    parser.add_argument(
        "--persistence", type=float, default=C.PERSISTENCE, help="amplitude decay per octave"
    )
    parser.add_argument(
        "--lacunarity", type=float, default=C.LACUNARITY, help="frequency growth per octave"
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="RNG seed for reproducibility (random if omitted)"
    )
    parser.add_argument(
        "--workers", type=int, default=1, help="processes used for octave accumulation"
    )
    # Outputs
    parser.add_argument(
        "--output", type=str, default=C.OUTPUT_FILE, help="color terrain image path"
    )
    parser.add_argument(
        "--grayscale", type=str, default=None, help="optional grayscale heightmap path"
    )
    parser.add_argument("--raw", type=str, default=None, help="optional .npy heightmap path")
    return parser


def main(argv=None):
    # === STEP 1: Argument parsing & validation ===
    parser = build_parser()
    args = parser.parse_args(argv)
    config = TerrainConfig(
        width=args.width,
        height=args.height,
        scale=args.scale,
        octaves=args.octaves,
        persistence=args.persistence,
        lacunarity=args.lacunarity,
        seed=args.seed,
        offset_x=args.offset_x,
        offset_y=args.offset_y,
        workers=args.workers,
    )
    try:
        config.validate()
    except ConfigurationError as exc:
        parser.error(str(exc))

    # === STEP 2: Permutation table ===
    table = PermutationTable.build(config.seed)
    print(f"[INFO] Permutation table ready (seed={config.seed})")

    # === STEP 3: Heightmap synthesis ===
    start = time.time()
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
    synthesizer.accumulate_octaves()
    heightmap = synthesizer.normalize()
    print(
        f"[INFO] Synthesized {config.width}x{config.height} heightmap "
        f"with {config.octaves} octaves in {time.time() - start:.2f} sec"
    )

    # === STEP 4: Elevation band classification ===
    emitter = ImageEmitter(heightmap)
    emitter.render(ColorClassifier())

    # === STEP 5: Save outputs ===
    emitter.save_color(args.output)
    if args.grayscale:
        emitter.save_grayscale(args.grayscale)
    if args.raw:
        emitter.save_raw(args.raw)

    return heightmap


if __name__ == "__main__":
    main()
