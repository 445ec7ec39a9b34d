"""Exceptions raised by biome generation."""


class BiomeGenError(Exception):
    """Base class for biome generation errors."""


class ConfigurationError(BiomeGenError, ValueError):
    """Invalid construction parameters (dimensions, cell size, seed, options)."""


class InvalidCoordinateError(BiomeGenError, ValueError):
    """A query was made with a non-finite coordinate."""
