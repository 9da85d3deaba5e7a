"""
image_emitter.py
----------------
Writes a finished heightmap to disk: classified color raster, grayscale
preview and raw float dump.

Purpose in Pipeline:
    - Step 5 in `main.py`.

Outputs:
    - Color raster (RGB, row-major, top to bottom), format picked from the
      file extension by Pillow. `.bmp` by default.
    - 8-bit grayscale preview written with OpenCV.
    - `.npy` file with the float64 heightmap.

Example:
    emitter = ImageEmitter(heightmap)
    emitter.render(ColorClassifier())
    emitter.save_color("output/terrain.bmp")
"""

import os

import cv2
import numpy as np
from PIL import Image


def _ensure_parent(path):
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


class ImageEmitter:
    def __init__(self, heightmap):
        self.heightmap = np.asarray(heightmap, dtype=np.float64)
        if self.heightmap.ndim != 2:
            raise ValueError(f"heightmap must be 2D, got shape {self.heightmap.shape}")
        self.pixels = None

    def render(self, classifier):
        """
        Classifies every cell.

        Returns:
            np.ndarray: uint8 RGB buffer of shape (H, W, 3).
        """
        self.pixels = classifier.classify_grid(self.heightmap)
        return self.pixels

    def save_color(self, path):
        if self.pixels is None:
            raise ValueError("Pixels not rendered yet. Call render() first.")
        _ensure_parent(path)
        Image.fromarray(self.pixels).save(path)
        print(f"[✓] Saved terrain image to {path}")

    def save_grayscale(self, path):
        _ensure_parent(path)
        normalized = cv2.normalize(self.heightmap, None, 0, 255, cv2.NORM_MINMAX)
        final = np.clip(normalized, 0, 255).astype(np.uint8)
        if not cv2.imwrite(path, final):
            raise OSError(f"could not write grayscale heightmap to {path}")
        print(f"Saved grayscale heightmap to: {path}")

    def save_raw(self, path):
        _ensure_parent(path)
        np.save(path, self.heightmap)
        print(f"Saved raw float64 heightmap to: {path}")
        print(f"Heightmap range: min={self.heightmap.min():.6f}, max={self.heightmap.max():.6f}")
