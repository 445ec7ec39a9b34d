"""Tests for the biome grid query surface."""

import math

import pytest
import numpy as np
from py_biomegen.config import settings
from py_biomegen.core import BiomeGenerator
from py_biomegen.core.biome_grid import BiomeGrid
from py_biomegen.core.biomes import BIOME_TABLE, BiomeType
from py_biomegen.errors import ConfigurationError, InvalidCoordinateError

G = BiomeType.GRASSLAND
O = BiomeType.OCEAN


@pytest.fixture(scope="module")
def world():
    """The reference 2000x1200 world at the default cell size."""
    return BiomeGrid(seed=1234, world_width=2000, world_height=1200, cell_size=50)


@pytest.fixture
def island():
    """A 3x3 grassland island inside a ring of ocean."""
    cells = np.full((5, 5), O, dtype=np.uint8)
    cells[1:4, 1:4] = G
    return BiomeGrid.from_cells(cells, cell_size=50)


class TestConstruction:
    """Test grid construction and validation."""

    def test_reference_dimensions(self, world):
        assert world.grid_dimensions() == (40, 24)
        assert world.width == 40
        assert world.height == 24
        assert world.cell_size == 50.0

    @pytest.mark.parametrize(
        "world_width,world_height,cell_size",
        [(1000, 999, 50), (101, 49, 10), (10, 10, 3.3), (1, 1, 50), (2000, 1200, 37.5)],
    )
    def test_dimension_formula(self, world_width, world_height, cell_size):
        grid = BiomeGrid(seed=5, world_width=world_width, world_height=world_height, cell_size=cell_size)

        assert grid.grid_dimensions() == (
            math.ceil(world_width / cell_size),
            math.ceil(world_height / cell_size),
        )

    def test_default_cell_size_from_settings(self):
        grid = BiomeGrid(seed=1, world_width=500, world_height=300)

        assert grid.cell_size == settings.default_cell_size

    def test_cell_size_is_a_property(self, world):
        assert isinstance(world.cell_size, float)
        assert not callable(world.cell_size)
        assert callable(world.grid_dimensions)

    def test_generator_alias(self):
        assert BiomeGenerator is BiomeGrid

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(world_width=0, world_height=100, cell_size=50),
            dict(world_width=100, world_height=-1, cell_size=50),
            dict(world_width=100, world_height=100, cell_size=0),
            dict(world_width=100, world_height=100, cell_size=-5),
            dict(world_width=float("inf"), world_height=100, cell_size=50),
            dict(world_width=100, world_height=float("nan"), cell_size=50),
        ],
    )
    def test_rejects_invalid_dimensions(self, kwargs):
        with pytest.raises(ConfigurationError):
            BiomeGrid(seed=1, **kwargs)

    def test_rejects_non_finite_seed(self):
        with pytest.raises(ConfigurationError):
            BiomeGrid(seed=float("nan"), world_width=100, world_height=100)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            BiomeGrid(seed=1, world_width=-100, world_height=100)

    def test_rejects_oversized_grid(self, monkeypatch):
        monkeypatch.setattr(settings, "max_grid_cells", 100)

        with pytest.raises(ConfigurationError):
            BiomeGrid(seed=1, world_width=1000, world_height=1000, cell_size=50)

    def test_chunk_rows_setting_gives_identical_grid(self, world, monkeypatch):
        monkeypatch.setattr(settings, "generation_chunk_rows", 5)
        chunked = BiomeGrid(seed=1234, world_width=2000, world_height=1200, cell_size=50)

        np.testing.assert_array_equal(chunked.grid_array(), world.grid_array())


class TestDeterminism:
    """Same inputs must give bit-identical grids."""

    @pytest.mark.parametrize("seed", [0, 1, 1234, 2**31 + 17])
    def test_identical_inputs(self, seed):
        a = BiomeGrid(seed=seed, world_width=800, world_height=600, cell_size=25)
        b = BiomeGrid(seed=seed, world_width=800, world_height=600, cell_size=25)

        assert a.grid_array().tobytes() == b.grid_array().tobytes()

    def test_different_seeds_differ(self):
        a = BiomeGrid(seed=1, world_width=2000, world_height=1200)
        b = BiomeGrid(seed=2, world_width=2000, world_height=1200)

        assert not np.array_equal(a.grid_array(), b.grid_array())

    def test_reference_center_cell(self, world):
        """Seed 1234 puts savanna at the grid centre."""
        assert world.biome_at(20 * 50 + 25, 12 * 50 + 25) == BiomeType.SAVANNA
        assert world.cells[12, 20] == BiomeType.SAVANNA


class TestQueries:
    """Test world-space queries."""

    def test_world_to_grid_floors(self, world):
        assert world.world_to_grid(0, 0) == (0, 0)
        assert world.world_to_grid(49.99, 50) == (0, 1)
        assert world.world_to_grid(125, 1199) == (2, 23)
        assert world.world_to_grid(-0.5, -50.5) == (-1, -2)

    def test_grid_to_world_is_cell_center(self, world):
        assert world.grid_to_world(0, 0) == (25.0, 25.0)
        assert world.world_to_grid(*world.grid_to_world(17, 9)) == (17, 9)

    def test_biome_at_matches_cells(self, island):
        assert island.biome_at(75, 75) == G
        assert island.biome_at(10, 10) == O
        assert island.biome_at(200, 100) == O
        assert island.biome_at(199.9, 199.9) == G

    @pytest.mark.parametrize("point", [(-1, 10), (10, -1), (2000, 10), (10, 1200), (1e9, 1e9)])
    def test_out_of_bounds_is_ocean(self, world, point):
        assert world.biome_at(*point) == BiomeType.OCEAN
        assert world.is_traversable(*point) is False
        assert world.food_multiplier_at(*point) == 0.0

    def test_partial_last_cell_extends_past_world_edge(self):
        cells = np.array([[G, G], [G, O]], dtype=np.uint8)
        grid = BiomeGrid.from_cells(cells, cell_size=50, world_width=60, world_height=70)

        assert grid.biome_at(80, 10) == G
        assert grid.biome_at(10, 90) == G
        assert grid.biome_at(80, 90) == O
        assert grid.biome_at(100, 10) == O
        assert grid.biome_at(10, 100) == O

    def test_partial_last_cell_on_generated_world(self):
        grid = BiomeGrid(seed=1234, world_width=2010, world_height=1200, cell_size=50)

        assert grid.width == 41
        assert grid.biome_at(2030, 600) == BiomeType(int(grid.cells[12, 40]))
        assert grid.biome_at(2050, 600) == BiomeType.OCEAN

    @pytest.mark.parametrize("point", [(float("nan"), 0), (0, float("inf")), (float("-inf"), 5)])
    def test_non_finite_queries_are_rejected(self, world, point):
        with pytest.raises(InvalidCoordinateError):
            world.biome_at(*point)
        with pytest.raises(InvalidCoordinateError):
            world.world_to_grid(*point)

    def test_biome_config_at(self, island):
        config = island.biome_config_at(75, 75)

        assert config.type == G
        assert config.attributes is BIOME_TABLE[G]

    def test_attribute_projection(self, world):
        """Point queries and flat maps agree with the table for every cell."""
        traversable = world.traversability_map()
        food = world.food_map()
        labels = world.grid_array()

        for gy in range(world.height):
            for gx in range(world.width):
                wx, wy = world.grid_to_world(gx, gy)
                biome = world.biome_at(wx, wy)
                idx = gy * world.width + gx

                assert labels[idx] == biome
                assert world.is_traversable(wx, wy) == BIOME_TABLE[biome].traversable
                assert traversable[idx] == int(BIOME_TABLE[biome].traversable)
                assert world.food_multiplier_at(wx, wy) == BIOME_TABLE[biome].food_multiplier
                assert food[idx] == BIOME_TABLE[biome].food_multiplier


class TestBulkViews:
    """Test the flat arrays and the 2D label view."""

    def test_reference_lengths(self, world):
        assert len(world.traversability_map()) == 960
        assert len(world.food_map()) == 960
        assert len(world.grid_array()) == 960

    def test_dtypes(self, world):
        assert world.traversability_map().dtype == np.uint8
        assert world.grid_array().dtype == np.uint8
        assert world.food_map().dtype == np.float64
        assert set(np.unique(world.traversability_map())) <= {0, 1}

    def test_arrays_are_read_only(self, world):
        for array in (world.traversability_map(), world.food_map(), world.grid_array(), world.cells):
            with pytest.raises(ValueError):
                array[0] = 1

    def test_arrays_are_shared_not_recomputed(self, world):
        assert world.traversability_map() is world.traversability_map()
        assert world.grid_array() is world.grid_array()

    def test_grid_is_row_major_labels(self, island):
        rows = island.grid()

        assert len(rows) == 5
        assert all(len(row) == 5 for row in rows)
        assert rows[0][0] is BiomeType.OCEAN
        assert rows[2][2] is BiomeType.GRASSLAND

    def test_grid_returns_a_copy(self, island):
        rows = island.grid()
        rows[2][2] = BiomeType.DESERT

        assert island.biome_at(125, 125) == G

    def test_island_traversability(self, island):
        expected = np.zeros((5, 5), dtype=np.uint8)
        expected[1:4, 1:4] = 1

        np.testing.assert_array_equal(island.traversability_map(), expected.reshape(-1))


class TestFromCells:
    """Test building grids from explicit label arrays."""

    def test_world_size_defaults_to_extent(self, island):
        assert island.world_width == 250.0
        assert island.world_height == 250.0
        assert island.seed is None

    def test_source_array_is_copied(self):
        cells = np.full((2, 2), G, dtype=np.uint8)
        grid = BiomeGrid.from_cells(cells, cell_size=10)
        cells[0, 0] = O

        assert grid.biome_at(0, 0) == G

    @pytest.mark.parametrize(
        "cells",
        [
            np.zeros(4),
            np.zeros((0, 3)),
            np.full((2, 2), 9),
            np.full((2, 2), -1),
            np.full((2, 2), 2.7),
            np.full((2, 2), np.nan),
            np.full((2, 2), np.inf),
            np.array([["a", "b"], ["c", "d"]]),
        ],
    )
    def test_rejects_bad_arrays(self, cells):
        with pytest.raises(ConfigurationError):
            BiomeGrid.from_cells(cells, cell_size=10)

    def test_accepts_whole_valued_floats(self):
        grid = BiomeGrid.from_cells(np.full((2, 2), 2.0), cell_size=10)

        assert grid.cells.dtype == np.uint8
        assert grid.biome_at(5, 5) == BiomeType.FOREST

    def test_rejects_mismatched_world_size(self):
        with pytest.raises(ConfigurationError):
            BiomeGrid.from_cells(np.zeros((2, 2), dtype=np.uint8), cell_size=10, world_width=500)

    def test_accepts_partial_last_cell(self):
        grid = BiomeGrid.from_cells(np.zeros((2, 3), dtype=np.uint8), cell_size=10, world_width=25, world_height=15)

        assert grid.grid_dimensions() == (3, 2)


class TestAnalysis:
    """Test statistics and region grouping."""

    def test_statistics(self, island):
        assert island.biome_statistics() == {"Ocean": 16, "Grassland": 9}

    def test_statistics_total(self, world):
        assert sum(world.biome_statistics().values()) == 960

    def test_regions(self, island):
        regions = island.biome_regions()

        assert len(regions) == 2
        ocean, grassland = regions
        assert ocean.id == 0
        assert ocean.biome_type == BiomeType.OCEAN
        assert len(ocean.cells) == 16
        assert grassland.biome_type == BiomeType.GRASSLAND
        assert grassland.cells == {6, 7, 8, 11, 12, 13, 16, 17, 18}
        assert grassland.area == 9 * 50 * 50
        assert grassland.center_cell == 12

    def test_regions_use_four_connectivity(self):
        cells = np.array([[G, O], [O, G]], dtype=np.uint8)
        regions = BiomeGrid.from_cells(cells, cell_size=10).biome_regions()

        assert [r.biome_type for r in regions] == [O, O, G, G]

    def test_regions_cover_grid(self, world):
        regions = world.biome_regions()
        covered = set()
        for region in regions:
            assert not covered & region.cells
            covered |= region.cells

        assert covered == set(range(960))
