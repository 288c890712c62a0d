from typing import NamedTuple, Optional


class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes


class ResolutionIntent(NamedTuple):
    """Validated download request, separated from HTTP concerns"""
    url: str
    max_height: Optional[int]
