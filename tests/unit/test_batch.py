from unittest.mock import AsyncMock

import pytest

from tripsync.remote.batch import MAX_BATCH, OpType, WriteOp, chunk_operations, execute_batched


def _sets(n):
    return [(f"ref-{i}", {"id": i}) for i in range(n)]


@pytest.mark.parametrize("count,sizes", [(0, []), (450, [450]), (451, [450, 1]), (901, [450, 450, 1])])
def test_chunk_sizes(count, sizes):
    assert [len(chunk) for chunk in chunk_operations([], _sets(count))] == sizes


def test_deletes_come_before_sets():
    chunks = chunk_operations(["old-1", "old-2"], [("new-1", {"id": 1})], max_batch=2)

    assert chunks == [
        [WriteOp(OpType.DELETE, "old-1"), WriteOp(OpType.DELETE, "old-2")],
        [WriteOp(OpType.SET, "new-1", {"id": 1})],
    ]


def test_max_batch_must_be_positive():
    with pytest.raises(ValueError):
        chunk_operations([], _sets(1), max_batch=0)


@pytest.mark.asyncio
async def test_execute_commits_every_chunk_in_order():
    commit = AsyncMock()

    result = await execute_batched(["old"], _sets(MAX_BATCH), commit)

    assert result.ok
    assert (result.committed_chunks, result.total_chunks) == (2, 2)
    first, second = (call.args[0] for call in commit.await_args_list)
    assert first[0] == WriteOp(OpType.DELETE, "old")
    assert len(first) == MAX_BATCH
    assert second == [WriteOp(OpType.SET, "ref-449", {"id": 449})]


@pytest.mark.asyncio
async def test_execute_with_nothing_to_do():
    commit = AsyncMock()

    result = await execute_batched([], [], commit)

    assert result.ok
    assert result.total_chunks == 0
    commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_execute_stops_at_first_failure():
    error = RuntimeError("transaction aborted")
    commit = AsyncMock(side_effect=[None, error, None])

    result = await execute_batched([], _sets(901), commit)

    assert not result.ok
    assert result.error is error
    assert (result.committed_chunks, result.total_chunks) == (1, 3)
    assert commit.await_count == 2
