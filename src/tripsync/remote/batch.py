"""Chunked execution of delete+set operations under a per-transaction ceiling.

Deletes are ordered before sets, the combined list is split into chunks of at
most ``max_batch`` operations, and the chunks are committed one after another.
The first failing chunk stops execution; nothing is retried here.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

# Headroom under a hard 500-operation transaction limit.
MAX_BATCH = 450


class OpType(str, Enum):
    DELETE = "delete"
    SET = "set"


@dataclass(frozen=True)
class WriteOp:
    type: OpType
    ref: Any
    data: Any = None


@dataclass(frozen=True)
class BatchResult:
    committed_chunks: int
    total_chunks: int
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


CommitFn = Callable[[list[WriteOp]], Awaitable[None]]


def chunk_operations(
    delete_refs: Sequence[Any],
    set_operations: Sequence[tuple[Any, Any]],
    max_batch: int = MAX_BATCH,
) -> list[list[WriteOp]]:
    if max_batch <= 0:
        raise ValueError("max_batch must be positive")
    ops = [WriteOp(OpType.DELETE, ref) for ref in delete_refs]
    ops.extend(WriteOp(OpType.SET, ref, data) for ref, data in set_operations)
    return [ops[i : i + max_batch] for i in range(0, len(ops), max_batch)]


async def execute_batched(
    delete_refs: Sequence[Any],
    set_operations: Sequence[tuple[Any, Any]],
    commit: CommitFn,
    max_batch: int = MAX_BATCH,
) -> BatchResult:
    """Commit deletes then sets in sequential chunks.

    Args:
        delete_refs: References to remove, in order.
        set_operations: ``(ref, payload)`` pairs to write, in order.
        commit: Applies one chunk atomically; raises if the chunk is not applied.
        max_batch: Maximum operations per chunk.

    Returns:
        BatchResult with the number of chunks committed before any failure.
    """
    chunks = chunk_operations(delete_refs, set_operations, max_batch)
    total = len(chunks)
    for index, chunk in enumerate(chunks):
        try:
            await commit(chunk)
        except Exception as e:
            logger.error("Batch %d/%d failed after %d committed: %s", index + 1, total, index, e)
            return BatchResult(committed_chunks=index, total_chunks=total, error=e)
        logger.info("Committed batch %d/%d", index + 1, total)
    return BatchResult(committed_chunks=total, total_chunks=total)
