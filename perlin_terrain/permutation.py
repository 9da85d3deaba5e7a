"""
permutation.py
--------------
Builds the 512-entry permutation table that classic Perlin noise hashes
lattice corners with.

How It Works:
    1. Shuffle 0..255 with a seeded `numpy.random.RandomState`.
    2. Concatenate the shuffle with itself so `p[i + 1]` never needs a wrap.
    3. Freeze the array; the table is passed explicitly to every evaluation.

Example:
    table = PermutationTable.build(seed=42)
    noise = evaluate(1.5, 2.25, table)
"""

import numpy as np

from perlin_terrain.config import ConfigurationError, check_seed

TABLE_SIZE = 256


class PermutationTable:
    """
    Immutable doubled permutation of 0..255.
    """

    def __init__(self, permutation, seed=None):
        p = np.asarray(permutation)
        if p.shape != (TABLE_SIZE,) or not np.issubdtype(p.dtype, np.integer):
            raise ConfigurationError(
                f"permutation must hold {TABLE_SIZE} integers, got shape {p.shape}"
            )
        if not np.array_equal(np.sort(p), np.arange(TABLE_SIZE)):
            raise ConfigurationError("permutation must contain each of 0..255 once")

        values = np.stack([p, p]).flatten().astype(np.int64)
        values.flags.writeable = False
        self._values = values
        self.seed = seed

    @classmethod
    def build(cls, seed=None):
        """
        Shuffles 0..255 into a new table.

        Args:
            seed (int or None): Non-negative seed below 2**64. None pulls
                entropy from the OS, so the table differs on every call.

        Returns:
            PermutationTable
        """
        seed = check_seed(seed)
        # RandomState only takes 32-bit words; wide seeds are split in two.
        if seed is not None and seed >= 2**32:
            rng = np.random.RandomState([seed & 0xFFFFFFFF, seed >> 32])
        else:
            rng = np.random.RandomState(seed)
        p = np.arange(TABLE_SIZE, dtype=np.int64)
        rng.shuffle(p)
        return cls(p, seed=seed)

    @classmethod
    def from_permutation(cls, permutation):
        """Wraps an explicit permutation of 0..255."""
        return cls(permutation)

    @property
    def values(self):
        return self._values

    def __len__(self):
        return len(self._values)

    def __getitem__(self, index):
        return self._values[index]

    def __eq__(self, other):
        if not isinstance(other, PermutationTable):
            return NotImplemented
        return np.array_equal(self._values, other._values)

    def __hash__(self):
        return hash(self._values.tobytes())

    def __repr__(self):
        return f"PermutationTable(seed={self.seed!r}, head={self._values[:4].tolist()})"
