"""Flat per-cell maps projected from a label grid through the biome table."""

from dataclasses import dataclass

import numpy as np

from .biomes import FOOD_LOOKUP, TRAVERSABLE_LOOKUP


def _read_only(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class DerivedMaps:
    """
    Read-only flat arrays of length width*height, indexed ``y * width + x``.

    Attributes:
        labels: uint8 biome label indices
        traversability: uint8, 1 = open, 0 = blocked
        food: float64 food multipliers
    """

    labels: np.ndarray
    traversability: np.ndarray
    food: np.ndarray

    @classmethod
    def from_cells(cls, cells: np.ndarray) -> "DerivedMaps":
        """Project a (height, width) label array once; the results are never mutated."""
        labels = np.ascontiguousarray(cells, dtype=np.uint8).reshape(-1).copy()
        return cls(
            labels=_read_only(labels),
            traversability=_read_only(TRAVERSABLE_LOOKUP[labels]),
            food=_read_only(FOOD_LOOKUP[labels]),
        )
