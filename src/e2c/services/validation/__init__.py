"""Problem validation pipeline: resolve, chunk, submit, poll, evaluate."""

from .chunker import chunk
from .engine import ValidationEngine
from .poller import ResultPoller
from .submitter import BatchSubmitter

__all__ = [
    "BatchSubmitter",
    "ResultPoller",
    "ValidationEngine",
    "chunk",
]
