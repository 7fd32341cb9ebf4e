from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class ShrinkResult(BaseModel):
    source: Path
    output_name: str
    url: str  # https://<api-host>/output/...
    input_size: int | None = Field(None, ge=0)
    output_size: int | None = Field(None, ge=0)

    @property
    def ratio(self) -> float | None:
        """Output size as a fraction of the input size, when both are known."""
        if not self.input_size or self.output_size is None:
            return None
        return self.output_size / self.input_size
