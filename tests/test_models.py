"""Tests for meili.models — DictObject, TaskStatus, TaskInfo and Task."""
from __future__ import annotations

import dataclasses
import json

import pytest

from meili.errors import DecodeError
from meili.models import DictObject, ServiceError, Task, TaskInfo, TaskStatus, task_list


# ── DictObject ─────────────────────────────────────────────────────────

class TestDictObject:
    """Tests for DictObject attribute-style dict access."""

    def test_init_kwargs(self):
        obj = DictObject(a=1, b=2)
        assert obj["a"] == 1
        assert obj.b == 2

    def test_set_via_attr(self):
        obj = DictObject()
        obj.key = "val"
        assert obj["key"] == "val"

    def test_delete_via_attr(self):
        obj = DictObject(a=1)
        del obj.a
        assert "a" not in obj

    def test_dict_identity(self):
        obj = DictObject(a=1)
        assert obj.__dict__ is obj

    def test_object_pairs_hook(self):
        obj = json.loads('{"hits": [{"id": 1}], "query": "a"}', object_pairs_hook=DictObject)
        assert obj.query == "a"
        assert obj.hits[0].id == 1


# ── TaskStatus ─────────────────────────────────────────────────────────

class TestTaskStatus:
    def test_wire_values(self):
        assert [s.value for s in TaskStatus] == ["enqueued", "processing", "succeeded", "failed"]

    def test_terminal_partition(self):
        assert {s for s in TaskStatus if s.is_terminal} == {TaskStatus.SUCCEEDED, TaskStatus.FAILED}
        assert not TaskStatus.ENQUEUED.is_terminal
        assert not TaskStatus.PROCESSING.is_terminal


# ── TaskInfo ───────────────────────────────────────────────────────────

class TestTaskInfo:
    def test_from_dict(self):
        info = TaskInfo.from_dict({
            "taskUid": 12,
            "indexUid": "movies",
            "status": "enqueued",
            "type": "documentAdditionOrUpdate",
            "enqueuedAt": "2024-05-01T10:00:00.000000Z",
        })
        assert info.task_uid == 12
        assert info.index_uid == "movies"
        assert info.status is TaskStatus.ENQUEUED
        assert info.type == "documentAdditionOrUpdate"
        assert info.enqueued_at == "2024-05-01T10:00:00.000000Z"

    def test_legacy_update_id(self):
        assert TaskInfo.from_dict({"updateId": 3}).task_uid == 3

    def test_missing_status_defaults_to_enqueued(self):
        assert TaskInfo.from_dict({"taskUid": 1}).status is TaskStatus.ENQUEUED

    def test_immutable(self):
        info = TaskInfo(task_uid=1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            info.task_uid = 2

    @pytest.mark.parametrize("data", [
        {},
        {"taskUid": "1"},
        {"taskUid": True},
        {"taskUid": 1, "status": "paused"},
        [],
        None,
    ])
    def test_malformed(self, data):
        with pytest.raises(DecodeError):
            TaskInfo.from_dict(data)


# ── Task ───────────────────────────────────────────────────────────────

class TestTask:
    def test_succeeded(self):
        task = Task.from_dict(DictObject(
            uid=4, indexUid="movies", status="succeeded", type="indexCreation",
            details=DictObject(primaryKey="id"), duration="PT0.01S",
            enqueuedAt="e", startedAt="s", finishedAt="f",
        ))
        assert task.uid == 4
        assert task.status is TaskStatus.SUCCEEDED
        assert task.is_terminal
        assert task.details == {"primaryKey": "id"}
        assert task.error is None
        assert (task.enqueued_at, task.started_at, task.finished_at) == ("e", "s", "f")
        assert task.raw.duration == "PT0.01S"

    def test_failed_with_error(self):
        task = Task.from_dict({
            "uid": 5,
            "status": "failed",
            "error": {
                "message": "Document identifier `a b` is invalid.",
                "code": "invalid_document_id",
                "type": "invalid_request",
                "link": "https://docs.meilisearch.com/errors#invalid_document_id",
            },
        })
        assert task.status is TaskStatus.FAILED
        assert task.error == ServiceError(
            message="Document identifier `a b` is invalid.",
            code="invalid_document_id",
            type="invalid_request",
            link="https://docs.meilisearch.com/errors#invalid_document_id",
        )

    def test_non_terminal(self):
        task = Task.from_dict({"uid": 1, "status": "processing"})
        assert not task.is_terminal

    @pytest.mark.parametrize("data", [
        {"uid": 1},
        {"status": "enqueued"},
        {"uid": 1, "status": "ENQUEUED"},
        {"uid": 1, "status": "failed", "error": "boom"},
        "task",
    ])
    def test_malformed(self, data):
        with pytest.raises(DecodeError):
            Task.from_dict(data)


class TestTaskList:
    def test_results(self):
        tasks = task_list({"results": [{"uid": 2, "status": "failed"}, {"uid": 1, "status": "enqueued"}]})
        assert [t.uid for t in tasks] == [2, 1]

    def test_missing_results(self):
        with pytest.raises(DecodeError):
            task_list({"total": 0})
