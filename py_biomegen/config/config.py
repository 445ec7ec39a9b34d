from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BIOMEGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Grid Configuration
    default_cell_size: float = Field(default=50.0, gt=0, description="Cell size used when none is given")
    max_grid_cells: int = Field(default=4_000_000, gt=0, description="Max allowed width*height in cells")
    generation_chunk_rows: int = Field(
        default=0, ge=0, description="Rows classified per chunk (0 = whole grid at once)"
    )

    # Boundary Overlay Configuration
    boundary_thickness: float = Field(default=8.0, gt=0, description="Boundary line thickness in world units")
    merge_alignment_tolerance: float = Field(
        default=1.0, ge=0, description="Max centre/extent difference for rectangles to share a row or column"
    )
    merge_gap_tolerance: float = Field(
        default=2.0, ge=0, description="Max gap between rectangle edges that still counts as touching"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="plain", description="Logging format (plain or json)")


# Instantiate singleton settings object
settings = Settings()
