"""
Example generating a biome world and drawing its layers and boundary overlay.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from matplotlib.patches import Rectangle
from py_biomegen.core import (
    BiomeGrid, BiomeType, BIOME_TABLE, BIOME_NAMES,
    extract_boundary_segments, extract_boundaries
)
from py_biomegen.utils.logging import configure_logging


def main():
    configure_logging()

    # Configuration
    seed = 1234
    world_width, world_height, cell_size = 2000, 1200, 50

    grid = BiomeGrid(seed, world_width, world_height, cell_size)
    width, height = grid.grid_dimensions()
    print(f"Grid: {width}x{height} cells of {grid.cell_size} units")

    # Boundary overlay
    segments = extract_boundary_segments(grid)
    rectangles = extract_boundaries(grid)
    print(f"Boundary segments: {len(segments)} -> {len(rectangles)} merged rectangles")

    # Visualize results
    fig, axes = plt.subplots(1, 3, figsize=(18, 5))
    extent = (0, world_width, world_height, 0)

    # Biome map (grid row 0 at the top)
    ax = axes[0]
    colors = [BIOME_TABLE[b].visual_tag for b in BiomeType]
    image = ax.imshow(grid.cells, cmap=ListedColormap(colors), vmin=0, vmax=len(BiomeType) - 1,
                      extent=extent, interpolation='nearest')
    ax.set_title('Biomes')
    cbar = plt.colorbar(image, ax=ax, ticks=range(len(BiomeType)))
    cbar.ax.set_yticklabels([BIOME_NAMES[b] for b in BiomeType])

    # Food map
    ax = axes[1]
    food = grid.food_map().reshape(height, width)
    image = ax.imshow(food, cmap='YlGn', extent=extent, interpolation='nearest')
    ax.set_title('Food multiplier')
    plt.colorbar(image, ax=ax)

    # Traversability with boundary overlay, drawn in world space (y up)
    ax = axes[2]
    open_cells = grid.traversability_map().reshape(height, width)
    ax.imshow(np.flipud(open_cells), cmap='gray', origin='lower',
              extent=(0, world_width, 0, world_height), interpolation='nearest')
    for rect in rectangles:
        ax.add_patch(Rectangle((rect.left, rect.bottom), rect.width, rect.height, color='#ff6b35'))
    ax.set_title('Traversable + boundaries')

    for ax in axes:
        ax.set_aspect('equal')

    plt.tight_layout()
    plt.savefig('biome_demo.png', dpi=150)
    print("\nBiome visualization saved to biome_demo.png")

    # Print some statistics
    print("\nBiome distribution:")
    total = width * height
    for name, count in grid.biome_statistics().items():
        print(f"  {name}: {count} cells ({count / total * 100:.1f}%)")

    regions = grid.biome_regions()
    print(f"\nContiguous regions: {len(regions)}")


if __name__ == "__main__":
    main()
