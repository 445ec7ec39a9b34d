"""
Biome labels, their static attribute table, and the noise-based classifier.

This module implements:
- The closed set of biome labels and one attribute row per label
- Continent-mask plus elevation/moisture/temperature classification
- Row-chunked classification with output identical to a one-shot pass
"""

import structlog
import numpy as np
from typing import Dict, NamedTuple, Optional, Union
from dataclasses import dataclass
from enum import IntEnum

from ..errors import ConfigurationError
from .noise import NoiseField

logger = structlog.get_logger()


class BiomeType(IntEnum):
    """Biome labels. Values double as the label index used in flat arrays."""

    OCEAN = 0
    MOUNTAIN = 1
    FOREST = 2
    GRASSLAND = 3
    DESERT = 4
    SAVANNA = 5


@dataclass(frozen=True)
class BiomeAttributes:
    """Static per-biome attributes."""

    traversable: bool
    food_multiplier: float
    elevation_bias: float
    visual_tag: str  # Base colour, interpreted by renderers only


class BiomeConfig(NamedTuple):
    """A biome label together with its attribute row."""

    type: BiomeType
    attributes: BiomeAttributes


BIOME_TABLE: Dict[BiomeType, BiomeAttributes] = {
    BiomeType.OCEAN: BiomeAttributes(
        traversable=False, food_multiplier=0.0, elevation_bias=-0.02, visual_tag="#0d2438"
    ),
    BiomeType.MOUNTAIN: BiomeAttributes(
        traversable=False, food_multiplier=0.0, elevation_bias=0.05, visual_tag="#2a2a2a"
    ),
    BiomeType.FOREST: BiomeAttributes(
        traversable=True, food_multiplier=3.0, elevation_bias=0.01, visual_tag="#2d5a2d"
    ),
    BiomeType.GRASSLAND: BiomeAttributes(
        traversable=True, food_multiplier=1.5, elevation_bias=0.0, visual_tag="#7db85c"
    ),
    BiomeType.DESERT: BiomeAttributes(
        traversable=True, food_multiplier=0.15, elevation_bias=0.0, visual_tag="#d4a76a"
    ),
    BiomeType.SAVANNA: BiomeAttributes(
        traversable=True, food_multiplier=0.8, elevation_bias=0.0, visual_tag="#9b8653"
    ),
}

# Biome names for display
BIOME_NAMES = {
    BiomeType.OCEAN: "Ocean",
    BiomeType.MOUNTAIN: "Mountain",
    BiomeType.FOREST: "Forest",
    BiomeType.GRASSLAND: "Grassland",
    BiomeType.DESERT: "Desert",
    BiomeType.SAVANNA: "Savanna",
}

# High contrast palette for overlay mode
BIOME_HIGHLIGHT_COLORS = {
    BiomeType.OCEAN: "#0066cc",
    BiomeType.MOUNTAIN: "#333333",
    BiomeType.FOREST: "#00cc00",
    BiomeType.GRASSLAND: "#88ff88",
    BiomeType.DESERT: "#ffaa00",
    BiomeType.SAVANNA: "#cccc66",
}

# Lookup arrays indexed by label value, used to project label grids in bulk
TRAVERSABLE_LOOKUP = np.array(
    [BIOME_TABLE[b].traversable for b in BiomeType], dtype=np.uint8
)
FOOD_LOOKUP = np.array(
    [BIOME_TABLE[b].food_multiplier for b in BiomeType], dtype=np.float64
)


def biome_config(biome: BiomeType) -> BiomeConfig:
    """Return the label with its attribute row."""
    biome = BiomeType(biome)
    return BiomeConfig(biome, BIOME_TABLE[biome])


@dataclass
class BiomeOptions:
    """Biome classification options. Defaults reproduce the reference worlds."""

    # Continent mask
    continent_radius_factor: float = 0.35  # Fraction of min(width, height)
    continent_falloff: float = 0.8

    # Noise fields
    octaves: int = 4
    elevation_frequency: float = 0.03
    moisture_frequency: float = 0.04
    temperature_frequency: float = 0.02
    island_frequency: float = 0.01
    moisture_offset: float = 1000.0
    temperature_offset: float = 2000.0
    island_weight: float = 0.3
    elevation_weight: float = 0.2

    # Decision thresholds
    ocean_land_mass: float = 0.3
    mountain_elevation: float = 0.7
    mountain_land_mass: float = 0.5
    forest_moisture: float = 0.6
    forest_temperature: float = 0.4
    desert_moisture: float = 0.3
    desert_temperature: float = 0.6
    savanna_moisture: float = 0.4
    savanna_temperature: float = 0.5

    def __post_init__(self):
        if self.octaves < 1:
            raise ConfigurationError(f"octaves must be at least 1, got {self.octaves}")
        if self.continent_radius_factor <= 0:
            raise ConfigurationError("continent_radius_factor must be positive")


@dataclass
class TerrainSample:
    """Intermediate fields behind a classification, for diagnostics."""

    elevation: Union[float, np.ndarray]
    moisture: Union[float, np.ndarray]
    temperature: Union[float, np.ndarray]
    continent_shape: Union[float, np.ndarray]
    land_mass: Union[float, np.ndarray]


class BiomeClassifier:
    """Assigns a biome label to each grid cell from seeded noise and a continent mask."""

    def __init__(self, seed: float, width: int, height: int, options: Optional[BiomeOptions] = None):
        """
        Initialize biome classifier.

        Args:
            seed: World seed
            width: Grid width in cells
            height: Grid height in cells
            options: Biome classification options
        """
        self.seed = seed
        self.width = width
        self.height = height
        self.options = options or BiomeOptions()
        self.noise = NoiseField(seed)

        self.center_x = width / 2
        self.center_y = height / 2
        self.continent_radius = min(width, height) * self.options.continent_radius_factor

    def sample_fields(self, x, y) -> TerrainSample:
        """
        Evaluate the noise fields and continent mask at grid coordinates.

        Elevation, moisture and temperature come from the same noise field
        but at distinct coordinate offsets and base frequencies, which keeps
        them decorrelated.
        """
        opts = self.options
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        dx = (x - self.center_x) / self.continent_radius
        dy = (y - self.center_y) / self.continent_radius
        dist_from_center = np.sqrt(dx * dx + dy * dy)

        fbm = self.noise.fbm
        elevation = np.asarray(fbm(x, y, opts.octaves, opts.elevation_frequency))
        moisture = np.asarray(
            fbm(x + opts.moisture_offset, y + opts.moisture_offset, opts.octaves, opts.moisture_frequency)
        )
        temperature = np.asarray(
            fbm(x + opts.temperature_offset, y + opts.temperature_offset, opts.octaves, opts.temperature_frequency)
        )

        continent_shape = np.maximum(0.0, 1.0 - dist_from_center * opts.continent_falloff)
        island_noise = np.asarray(fbm(x, y, opts.octaves, opts.island_frequency)) * opts.island_weight
        land_mass = continent_shape + island_noise + elevation * opts.elevation_weight

        return TerrainSample(
            elevation=elevation,
            moisture=moisture,
            temperature=temperature,
            continent_shape=continent_shape,
            land_mass=land_mass,
        )

    def _decide(self, sample: TerrainSample) -> np.ndarray:
        """Apply the ordered decision rules; the first matching rule wins."""
        opts = self.options
        conditions = [
            sample.land_mass < opts.ocean_land_mass,
            (sample.elevation > opts.mountain_elevation) & (sample.land_mass > opts.mountain_land_mass),
            (sample.moisture > opts.forest_moisture) & (sample.temperature > opts.forest_temperature),
            (sample.moisture < opts.desert_moisture) & (sample.temperature > opts.desert_temperature),
            (sample.moisture > opts.savanna_moisture) & (sample.temperature > opts.savanna_temperature),
        ]
        choices = [
            BiomeType.OCEAN,
            BiomeType.MOUNTAIN,
            BiomeType.FOREST,
            BiomeType.DESERT,
            BiomeType.SAVANNA,
        ]
        return np.select(conditions, choices, default=BiomeType.GRASSLAND).astype(np.uint8)

    def classify_cell(self, x: int, y: int) -> BiomeType:
        """Classify a single grid cell."""
        return BiomeType(int(self._decide(self.sample_fields(x, y))))

    def classify_rows(self, start: int, stop: int) -> np.ndarray:
        """
        Classify grid rows ``start`` (inclusive) to ``stop`` (exclusive).

        Returns:
            uint8 label array of shape (stop - start, width)
        """
        xs = np.arange(self.width, dtype=np.float64)
        ys = np.arange(start, stop, dtype=np.float64)
        gx, gy = np.meshgrid(xs, ys)
        return self._decide(self.sample_fields(gx, gy))

    def classify_grid(self, chunk_rows: int = 0) -> np.ndarray:
        """
        Classify every cell of the grid.

        Args:
            chunk_rows: If positive, classify this many rows at a time

        Returns:
            uint8 label array of shape (height, width)
        """
        logger.info(
            "Classifying biomes", seed=self.seed, width=self.width, height=self.height
        )

        if chunk_rows <= 0 or chunk_rows >= self.height:
            return self.classify_rows(0, self.height)

        cells = np.empty((self.height, self.width), dtype=np.uint8)
        for start in range(0, self.height, chunk_rows):
            stop = min(start + chunk_rows, self.height)
            cells[start:stop] = self.classify_rows(start, stop)
            logger.debug("Classified chunk", start=start, stop=stop)
        return cells
