"""
Biome grid: the generated label array and its world-space query surface.

A grid is built once per (seed, world width, world height, cell size) and
never mutated afterwards; regenerating means constructing a new instance.
All arrays handed out are read-only, so a finished grid can be shared
between threads without locking.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

import numpy as np
import structlog
from scipy import ndimage

from ..config import settings
from ..errors import ConfigurationError
from ..utils.validation import check_coordinates, require_finite, require_positive
from .biomes import (
    BIOME_NAMES,
    BIOME_TABLE,
    BiomeClassifier,
    BiomeConfig,
    BiomeOptions,
    BiomeType,
)
from .derived_maps import DerivedMaps

logger = structlog.get_logger()

# 4-connectivity structuring element for region labelling
_FOUR_CONNECTED = np.array([[0, 1, 0], [1, 1, 1], [0, 1, 0]], dtype=bool)


@dataclass
class BiomeRegion:
    """Represents a contiguous biome region."""

    id: int
    biome_type: BiomeType
    cells: Set[int]  # Flat cell indices (y * width + x)
    area: float  # World units squared
    center_cell: int


class BiomeGrid:
    """Immutable grid of biome labels with world <-> grid coordinate mapping."""

    def __init__(
        self,
        seed: float,
        world_width: float,
        world_height: float,
        cell_size: Optional[float] = None,
        options: Optional[BiomeOptions] = None,
        chunk_rows: Optional[int] = None,
    ):
        """
        Generate the biome grid.

        Args:
            seed: World seed
            world_width: World width in world units
            world_height: World height in world units
            cell_size: Cell edge length in world units, defaults to settings.default_cell_size
            options: Biome classification options
            chunk_rows: Rows classified per chunk, defaults to settings.generation_chunk_rows

        Raises:
            ConfigurationError: If a dimension or the cell size is not positive and finite,
                or the grid would exceed settings.max_grid_cells
        """
        seed = require_finite("seed", seed)
        if cell_size is None:
            cell_size = settings.default_cell_size
        world_width = require_positive("world_width", world_width)
        world_height = require_positive("world_height", world_height)
        cell_size = require_positive("cell_size", cell_size)

        width = math.ceil(world_width / cell_size)
        height = math.ceil(world_height / cell_size)
        self._check_size(width, height)

        if chunk_rows is None:
            chunk_rows = settings.generation_chunk_rows

        logger.info(
            "Generating biome grid",
            seed=seed,
            world_width=world_width,
            world_height=world_height,
            cell_size=cell_size,
            width=width,
            height=height,
        )

        classifier = BiomeClassifier(seed, width, height, options)
        cells = classifier.classify_grid(chunk_rows=chunk_rows)

        self.seed = seed
        self._init_state(cells, cell_size, world_width, world_height)

        logger.info("Biome grid generated", biomes=len(np.unique(self._cells)))

    @classmethod
    def from_cells(
        cls,
        cells,
        cell_size: Optional[float] = None,
        world_width: Optional[float] = None,
        world_height: Optional[float] = None,
    ) -> "BiomeGrid":
        """
        Build a grid from an existing (height, width) label array.

        World dimensions default to the grid extent (cells * cell_size).

        Raises:
            ConfigurationError: If the array is not 2D and non-empty, holds
                values that are not biome labels, or a dimension is invalid
        """
        labels = np.asarray(cells)
        if labels.ndim != 2 or labels.size == 0:
            raise ConfigurationError(f"cells must be a non-empty 2D array, got shape {labels.shape}")
        if not np.issubdtype(labels.dtype, np.integer):
            if not np.issubdtype(labels.dtype, np.floating):
                raise ConfigurationError(f"cells must hold integer biome labels, got dtype {labels.dtype}")
            # Whole-valued floats are accepted; NaN, inf and fractions are not
            if not np.all(np.isfinite(labels)) or np.any(labels != np.round(labels)):
                raise ConfigurationError("cells contain values that are not biome labels")
        if np.any(labels < 0) or np.any(labels >= len(BiomeType)):
            raise ConfigurationError("cells contain values that are not biome labels")

        if cell_size is None:
            cell_size = settings.default_cell_size
        cell_size = require_positive("cell_size", cell_size)
        height, width = labels.shape
        world_width = require_positive(
            "world_width", width * cell_size if world_width is None else world_width
        )
        world_height = require_positive(
            "world_height", height * cell_size if world_height is None else world_height
        )
        if math.ceil(world_width / cell_size) != width or math.ceil(world_height / cell_size) != height:
            raise ConfigurationError(
                f"World size {world_width}x{world_height} does not match a "
                f"{width}x{height} grid of cell size {cell_size}"
            )
        cls._check_size(width, height)

        grid = cls.__new__(cls)
        grid.seed = None
        grid._init_state(labels.astype(np.uint8), cell_size, world_width, world_height)
        return grid

    @staticmethod
    def _check_size(width: int, height: int) -> None:
        if width * height > settings.max_grid_cells:
            raise ConfigurationError(
                f"Grid of {width}x{height} cells exceeds the limit of {settings.max_grid_cells}"
            )

    def _init_state(self, cells: np.ndarray, cell_size: float, world_width: float, world_height: float):
        self._cells = np.array(cells, dtype=np.uint8, copy=True)
        self._cells.flags.writeable = False
        self._height, self._width = self._cells.shape
        self._cell_size = float(cell_size)
        self.world_width = float(world_width)
        self.world_height = float(world_height)
        self._maps = DerivedMaps.from_cells(self._cells)

    # --- Dimensions ---

    @property
    def width(self) -> int:
        """Grid width in cells."""
        return self._width

    @property
    def height(self) -> int:
        """Grid height in cells."""
        return self._height

    @property
    def cell_size(self) -> float:
        """
        Cell edge length in world units.

        A read-only property like ``width`` and ``height``; ``grid_dimensions()``
        stays a method because it builds a tuple.
        """
        return self._cell_size

    @property
    def cells(self) -> np.ndarray:
        """Read-only (height, width) uint8 label array."""
        return self._cells

    @property
    def maps(self) -> DerivedMaps:
        return self._maps

    def grid_dimensions(self) -> Tuple[int, int]:
        """Return (width, height) in cells."""
        return self._width, self._height

    # --- Coordinate mapping ---

    def world_to_grid(self, world_x: float, world_y: float) -> Tuple[int, int]:
        """Map a world position to grid coordinates (floored division by cell size)."""
        world_x, world_y = check_coordinates(world_x, world_y)
        return math.floor(world_x / self._cell_size), math.floor(world_y / self._cell_size)

    def grid_to_world(self, grid_x: int, grid_y: int) -> Tuple[float, float]:
        """Return the world position of a cell's centre."""
        return (grid_x + 0.5) * self._cell_size, (grid_y + 0.5) * self._cell_size

    def in_bounds(self, grid_x: int, grid_y: int) -> bool:
        return 0 <= grid_x < self._width and 0 <= grid_y < self._height

    # --- Queries ---

    def biome_at(self, world_x: float, world_y: float) -> BiomeType:
        """
        Return the biome at a world position.

        Positions outside the grid are Ocean, the impassable default for
        unknown territory. The grid is ``ceil(world / cell_size)`` cells
        wide, so when the world size is not a whole number of cells the last
        cell overhangs it: positions in ``[world_width, width * cell_size)``
        (likewise for height) report that partial cell's biome, not Ocean.
        """
        gx, gy = self.world_to_grid(world_x, world_y)
        if not self.in_bounds(gx, gy):
            return BiomeType.OCEAN
        return BiomeType(int(self._cells[gy, gx]))

    def biome_config_at(self, world_x: float, world_y: float) -> BiomeConfig:
        """Return the biome and its attribute row at a world position."""
        biome = self.biome_at(world_x, world_y)
        return BiomeConfig(biome, BIOME_TABLE[biome])

    def is_traversable(self, world_x: float, world_y: float) -> bool:
        return BIOME_TABLE[self.biome_at(world_x, world_y)].traversable

    def food_multiplier_at(self, world_x: float, world_y: float) -> float:
        return BIOME_TABLE[self.biome_at(world_x, world_y)].food_multiplier

    # --- Bulk views ---

    def grid(self) -> List[List[BiomeType]]:
        """Return the labels as a fresh row-major list of rows."""
        return [[BiomeType(int(v)) for v in row] for row in self._cells]

    def traversability_map(self) -> np.ndarray:
        """Flat uint8 array, 1 = open, 0 = blocked, indexed y * width + x."""
        return self._maps.traversability

    def food_map(self) -> np.ndarray:
        """Flat float64 array of food multipliers, indexed y * width + x."""
        return self._maps.food

    def grid_array(self) -> np.ndarray:
        """Flat uint8 array of biome label indices, indexed y * width + x."""
        return self._maps.labels

    # --- Analysis ---

    def biome_statistics(self) -> Dict[str, int]:
        """
        Get statistics about biome distribution.

        Returns:
            Dictionary with biome names and cell counts
        """
        stats = {}
        unique_biomes, counts = np.unique(self._cells, return_counts=True)

        for biome_id, count in zip(unique_biomes, counts):
            stats[BIOME_NAMES[BiomeType(int(biome_id))]] = int(count)

        return stats

    def biome_regions(self) -> List[BiomeRegion]:
        """
        Group 4-connected cells of the same biome into regions.

        Regions are numbered in order of biome label, then in scan order of
        their first cell.
        """
        regions = []
        cell_area = self._cell_size ** 2

        for biome_type in BiomeType:
            mask = self._cells == biome_type
            if not mask.any():
                continue

            labelled, count = ndimage.label(mask, structure=_FOUR_CONNECTED)
            for component in range(1, count + 1):
                ys, xs = np.nonzero(labelled == component)
                flat = ys * self._width + xs
                center_cell = self._find_region_center(xs, ys, flat)

                regions.append(
                    BiomeRegion(
                        id=len(regions),
                        biome_type=biome_type,
                        cells=set(int(i) for i in flat),
                        area=len(flat) * cell_area,
                        center_cell=center_cell,
                    )
                )

        logger.info("Biome regions generated", count=len(regions))
        return regions

    @staticmethod
    def _find_region_center(xs: np.ndarray, ys: np.ndarray, flat: np.ndarray) -> int:
        """Return the member cell closest to the region centroid."""
        distance = (xs - xs.mean()) ** 2 + (ys - ys.mean()) ** 2
        return int(flat[int(np.argmin(distance))])


# Name used by simulation and renderer code
BiomeGenerator = BiomeGrid
