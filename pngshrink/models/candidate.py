from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

OUTPUT_PREFIX = "shrunk_"


class CandidateFile(BaseModel):
    """A user-supplied path that exists and sniffs as ``image/png``."""

    model_config = ConfigDict(frozen=True)

    path: Path
    mime_type: str = "image/png"

    @property
    def basename(self) -> str:
        return self.path.name

    @property
    def output_name(self) -> str:
        return OUTPUT_PREFIX + self.path.name
