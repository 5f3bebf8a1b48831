"""Application utilities."""

from .batching import BatchCommitController, BatchCommitPolicy, BatchCommitResult

__all__ = ["BatchCommitController", "BatchCommitPolicy", "BatchCommitResult"]
