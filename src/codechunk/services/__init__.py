"""
Service layer orchestrators for multi-file chunking.
"""

from .batch import chunk_batch, chunk_batch_stream

__all__ = ["chunk_batch", "chunk_batch_stream"]
