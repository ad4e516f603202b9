"""Owner-scoped remote stores and the batched write executor they share."""

from tripsync.remote.batch import MAX_BATCH, BatchResult, OpType, WriteOp, execute_batched
from tripsync.remote.interface import RemoteStore

__all__ = ["MAX_BATCH", "BatchResult", "OpType", "RemoteStore", "WriteOp", "execute_batched"]
