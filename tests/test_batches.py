"""Tests for meili.batches — chunking and ordered batch submission."""
from __future__ import annotations

import math

import pytest

from meili.batches import chunked, submit_in_batches
from meili.errors import ApiError, BatchSubmitError, ValidationError
from meili.models import TaskInfo


class _Submitter:
    """Records submitted chunks and fails on the chunk at ``fail_at``."""

    def __init__(self, fail_at=None):
        self.fail_at = fail_at
        self.chunks = []

    async def __call__(self, chunk, primary_key):
        index = len(self.chunks)
        self.chunks.append((chunk, primary_key))
        if index == self.fail_at:
            raise ApiError(400, b'', message='bad chunk', code='invalid_document_id')
        return TaskInfo(task_uid=100 + index, index_uid='movies')


# ── chunked ────────────────────────────────────────────────────────────

class TestChunked:
    @pytest.mark.parametrize("n, size", [(0, 3), (1, 1), (4, 2), (5, 2), (7, 10), (10, 3)])
    def test_partition(self, n, size):
        documents = [{'id': i} for i in range(n)]
        chunks = list(chunked(documents, size))
        assert len(chunks) == math.ceil(n / size)
        assert all(len(chunk) == size for chunk in chunks[:-1])
        if chunks:
            assert len(chunks[-1]) == (n % size or size)
        assert [doc for chunk in chunks for doc in chunk] == documents

    def test_tuple_input(self):
        assert list(chunked(('a', 'b', 'c'), 2)) == [['a', 'b'], ['c']]

    @pytest.mark.parametrize("size", [0, -1, 1.5, True, '2'])
    def test_invalid_size(self, size):
        with pytest.raises(ValidationError):
            list(chunked([1, 2], size))


# ── submit_in_batches ──────────────────────────────────────────────────

class TestSubmitInBatches:
    async def test_ordered_handles(self):
        submit = _Submitter()
        documents = [{'id': i} for i in range(5)]
        tasks = await submit_in_batches(submit, documents, 2, primary_key='id')
        assert [t.task_uid for t in tasks] == [100, 101, 102]
        assert submit.chunks == [
            ([{'id': 0}, {'id': 1}], 'id'),
            ([{'id': 2}, {'id': 3}], 'id'),
            ([{'id': 4}], 'id'),
        ]

    async def test_empty_collection(self):
        submit = _Submitter()
        assert await submit_in_batches(submit, [], 10) == []
        assert submit.chunks == []

    @pytest.mark.parametrize("size", [0, -5])
    async def test_non_positive_size_makes_no_call(self, size):
        submit = _Submitter()
        with pytest.raises(ValidationError):
            await submit_in_batches(submit, [{'id': 1}], size)
        assert submit.chunks == []

    async def test_fail_fast(self):
        submit = _Submitter(fail_at=1)
        documents = [{'id': i} for i in range(6)]
        with pytest.raises(BatchSubmitError) as excinfo:
            await submit_in_batches(submit, documents, 2)
        exc = excinfo.value
        assert exc.chunk_index == 1
        assert [t.task_uid for t in exc.submitted] == [100]
        assert isinstance(exc.__cause__, ApiError)
        assert len(submit.chunks) == 2

    async def test_first_chunk_fails(self):
        submit = _Submitter(fail_at=0)
        with pytest.raises(BatchSubmitError) as excinfo:
            await submit_in_batches(submit, [1, 2, 3], 1)
        assert excinfo.value.chunk_index == 0
        assert excinfo.value.submitted == []
        assert len(submit.chunks) == 1
