"""
Core biome generation functionality.
"""

from ..errors import BiomeGenError, ConfigurationError, InvalidCoordinateError
from .noise import NoiseField
from .biomes import (BiomeType, BiomeAttributes, BiomeConfig, BIOME_TABLE, BIOME_NAMES,
                     BIOME_HIGHLIGHT_COLORS, BiomeOptions, BiomeClassifier)
from .derived_maps import DerivedMaps
from .biome_grid import BiomeGrid, BiomeGenerator, BiomeRegion
from .boundaries import (Orientation, BoundaryOptions, BoundarySegment, MergedRectangle,
                         extract_boundary_segments, merge_rectangles, extract_boundaries)

__all__ = ['BiomeGenError', 'ConfigurationError', 'InvalidCoordinateError',
           'NoiseField',
           'BiomeType', 'BiomeAttributes', 'BiomeConfig', 'BIOME_TABLE', 'BIOME_NAMES',
           'BIOME_HIGHLIGHT_COLORS', 'BiomeOptions', 'BiomeClassifier',
           'DerivedMaps',
           'BiomeGrid', 'BiomeGenerator', 'BiomeRegion',
           'Orientation', 'BoundaryOptions', 'BoundarySegment', 'MergedRectangle',
           'extract_boundary_segments', 'merge_rectangles', 'extract_boundaries']
