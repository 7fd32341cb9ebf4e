from .candidate import CandidateFile
from .result import ShrinkResult

__all__ = [
    "CandidateFile",
    "ShrinkResult",
]
