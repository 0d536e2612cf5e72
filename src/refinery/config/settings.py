"""
Pydantic settings models for Refinery.

Every heuristic threshold used by the extraction pipeline lives here as a
tunable default. The values were tuned empirically and are meant to be
retuned per corpus.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ExtractorSettings(BaseModel):
    """Thresholds for normalization, candidate selection and pruning."""

    # Normalization
    max_depth: int = Field(
        default=256,
        ge=8,
        le=4096,
        description="Element nesting depth beyond which subtrees are dropped",
    )
    pattern_max_height: int = Field(
        default=6,
        ge=0,
        le=64,
        description="Nodes taller than this get an empty pattern and are never grouped",
    )
    anchor_bonus: float = Field(
        default=1.0,
        ge=0.0,
        le=100.0,
        description="Score added to a parent for every direct anchor child",
    )

    # Title localization
    title_word_slack: int = Field(
        default=5,
        ge=1,
        le=50,
        description="A text node may exceed the title's word count by less than this",
    )
    heading_fallback: bool = Field(
        default=False,
        description="Use a single h1 (or h2) as heading when no text matches the title",
    )

    # Candidate walk
    title_boost: float = Field(
        default=2.0,
        ge=1.0,
        le=10.0,
        description="Probability multiplier for children that contain the title",
    )
    min_descend_height: int = Field(
        default=1,
        ge=0,
        le=10,
        description="The walk never descends into a node shorter than this",
    )
    decisive_score_ratio: float = Field(
        default=4.0,
        gt=1.0,
        le=100.0,
        description="Winner/runner-up score ratio that triggers the words²/score pick",
    )
    fragmented_sum_ratio: float = Field(
        default=2 / 3,
        gt=0.0,
        le=1.0,
        description="Stop when winner and runner-up together hold less of the parent",
    )
    min_winner_probability: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Stop when the winner holds less of the parent's words",
    )
    title_lift_levels: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Ancestor levels searched for the title after the walk stops",
    )

    # Trash pruning
    prune_min_height: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Shallow nodes below this height are pruned when longest run < score",
    )
    prune_parent_score_ratio: float = Field(
        default=10.0,
        gt=1.0,
        le=1000.0,
        description="Node/parent score ratio above which a node is pruned",
    )
    prune_word_share: float = Field(
        default=1 / 3,
        gt=0.0,
        le=1.0,
        description="Word share of the candidate under which sparse nodes are pruned",
    )
    prune_sparse_tag_ratio: float = Field(
        default=2.0,
        gt=0.0,
        le=100.0,
        description="Tags per longest-run word that marks a small node as scaffolding",
    )
    prune_dense_tag_ratio: float = Field(
        default=5.0,
        gt=0.0,
        le=1000.0,
        description="Tags per longest-run word that marks any node as scaffolding",
    )
    prune_trailing_siblings: int = Field(
        default=2,
        ge=0,
        le=10,
        description="How many trailing siblings are checked for link clusters",
    )
    prune_anchor_ratio: float = Field(
        default=0.95,
        ge=0.0,
        le=1.0,
        description="Anchor word share above which a trailing node is pruned",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Minimum logging level",
    )
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="Log message format string",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Date format for log timestamps",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path to log file. None means console only.",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum log file size before rotation",
    )
    backup_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Number of backup log files to keep",
    )
    log_to_console: bool = Field(
        default=True,
        description="Whether to output logs to console",
    )

    @field_validator("file_path", mode="before")
    @classmethod
    def convert_file_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects."""
        if v is None:
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseModel):
    """
    Root configuration model.

    Settings are loaded from YAML with environment variable overrides.
    """

    extractor: ExtractorSettings = Field(
        default_factory=ExtractorSettings,
        description="Extraction heuristics",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    model_config = {
        "extra": "forbid",
        "validate_default": True,
    }
