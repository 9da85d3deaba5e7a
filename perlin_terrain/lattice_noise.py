"""
lattice_noise.py
----------------
Classic 2D Perlin noise over a permutation table.

How It Works:
    1. Wrap the integer lattice cell into the table range (`& 255`).
    2. Smooth the fractional offsets with the quintic fade curve.
    3. Hash the four cell corners through the table and pick a gradient each.
    4. Blend the four gradient dot products bilinearly.

All helpers work elementwise, so the same code evaluates one point or a whole
coordinate grid.

Example:
    table = PermutationTable.build(seed=7)
    value = evaluate(3.2, 0.75, table)
    block = evaluate_grid(xs, ys, table)
"""

import numpy as np


def fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)


def lerp(a, b, t):
    return a + (b - a) * t


def grad(hash_value, x, y):
    """
    Dot product of the hashed gradient direction with (x, y).

    The low 4 bits pick the components: u is x for h < 8 else y, v is y for
    h < 4, x for h in (12, 14), else 0. Bits 0 and 1 flip the signs of u and v.
    """
    h = np.bitwise_and(hash_value, 15)
    zero = np.zeros_like(np.asarray(x, dtype=np.float64))
    u = np.where(h < 8, x, y)
    v = np.where(h < 4, y, np.where((h == 12) | (h == 14), x, zero))
    u = np.where(np.bitwise_and(h, 1) == 0, u, -u)
    v = np.where(np.bitwise_and(h, 2) == 0, v, -v)
    return u + v


def evaluate_grid(x, y, table):
    """
    Evaluates Perlin noise at every (x, y) pair.

    Args:
        x, y (array_like): Broadcastable noise-space coordinates.
        table (PermutationTable): Hash table shared read-only by all calls.

    Returns:
        np.ndarray: Noise values, roughly in [-1, 1].
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    x, y = np.broadcast_arrays(x, y)
    p = table.values

    x_floor = np.floor(x)
    y_floor = np.floor(y)
    # floor(x) & 255, taken on floats so large coordinates cannot overflow
    xi = np.mod(x_floor, 256).astype(np.int64)
    yi = np.mod(y_floor, 256).astype(np.int64)
    xf = x - x_floor
    yf = y - y_floor
    u = fade(xf)
    v = fade(yf)

    # Hash coordinates of the four corners. Two lookups: the corner hash itself
    # picks the gradient, it is not fed through the table a third time.
    aa = p[p[xi] + yi]
    ab = p[p[xi] + yi + 1]
    ba = p[p[xi + 1] + yi]
    bb = p[p[xi + 1] + yi + 1]

    n00 = grad(aa, xf, yf)
    n10 = grad(ba, xf - 1, yf)
    n01 = grad(ab, xf, yf - 1)
    n11 = grad(bb, xf - 1, yf - 1)

    x1 = lerp(n00, n10, u)
    x2 = lerp(n01, n11, u)
    return lerp(x1, x2, v)


def evaluate(x, y, table):
    """Perlin noise at a single point, as a Python float."""
    return float(evaluate_grid(x, y, table))
