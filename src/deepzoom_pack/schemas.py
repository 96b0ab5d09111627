"""Pydantic schemas for run configuration and the sidecar index document."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from deepzoom_pack.types import SUPPORTED_SUFFIXES


class TaskListConfig(BaseModel):
    """Validated location of the two line-aligned task lists."""

    model_config = ConfigDict(extra="forbid")

    inputs_path: Path
    outputs_path: Path
    strict_pairing: bool = False


class RunConfig(BaseModel):
    """Validated options for one batch run."""

    model_config = ConfigDict(extra="forbid")

    tile_size: int = Field(default=512, gt=0)
    suffix: str = ".jpg"
    jpeg_quality: int = Field(default=85, ge=1, le=100)
    threads: int | None = Field(default=None, ge=1)
    keep_tiles: bool = False
    tiler: str = "pyvips"
    strict_pairing: bool = False

    @field_validator("suffix")
    @classmethod
    def _normalize_suffix(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized and not normalized.startswith("."):
            normalized = f".{normalized}"
        if normalized not in SUPPORTED_SUFFIXES:
            raise ValueError(f"suffix must be one of {', '.join(SUPPORTED_SUFFIXES)}.")
        return normalized

    @field_validator("tiler")
    @classmethod
    def _validate_tiler(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("tiler name cannot be empty.")
        return value.strip()


class SidecarTileEntry(BaseModel):
    """Byte range of one tile inside a container file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    binary_name: str = Field(alias="binaryName")
    start_offset: int = Field(alias="startOffset", ge=0)
    size: int = Field(ge=0)


class SidecarDocument(BaseModel):
    """The ``metadata.json`` document written next to each container."""

    model_config = ConfigDict(extra="forbid")

    width: int = Field(ge=0)
    height: int = Field(ge=0)
    tile_size: int = Field(gt=0)
    tiles: dict[str, SidecarTileEntry] = Field(default_factory=dict)
