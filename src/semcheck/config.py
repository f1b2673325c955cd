"""Comparison settings.

    max_depth: deepest item path accepted in either tree
    max_items: largest item count accepted in either tree
    max_workers: threads used to compare top-level subtrees (1 = inline)
    dedupe_reexports: collapse identical changes reported for one definition under several paths
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompareConfig(BaseModel):
    """Guards and switches for one comparison run."""

    max_depth: int = Field(
        default=64,
        description="Deepest item path accepted. Deeper trees abort before comparison.",
    )
    max_items: int = Field(
        default=200_000,
        description="Largest number of items accepted per tree.",
    )
    max_workers: int = Field(
        default=1,
        description="Worker threads for independent top-level subtrees. Output does not depend on it.",
    )
    dedupe_reexports: bool = Field(
        default=False,
        description="Report a change once per definition (def_id) instead of once per re-export path.",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("max_depth", "max_items", "max_workers")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}")
        return v
