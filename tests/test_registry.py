from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from nyantify_mcp.tracking import DuplicateTaskError, TaskRegistry, TaskResult


def test_immediate_end_is_below_threshold(clock) -> None:
    registry = TaskRegistry(60_000, clock=clock)

    registry.start("build", "Build project")
    result = registry.end("build")

    assert result == TaskResult(id="build", name="Build project", duration_ms=0, should_notify=False)


def test_force_notify_overrides_threshold(clock) -> None:
    registry = TaskRegistry(60_000, clock=clock)

    registry.start("lint", "Lint")
    clock.advance(0.5)
    result = registry.end("lint", force_notify=True)

    assert result is not None
    assert result.duration_ms == 500
    assert result.should_notify


def test_threshold_is_inclusive(clock) -> None:
    registry = TaskRegistry(60_000, clock=clock)

    registry.start("a", "Exactly a minute")
    registry.start("b", "Just under a minute")
    clock.advance(59.998)
    short = registry.end("b")
    clock.advance(0.002)
    long = registry.end("a")

    assert short is not None and not short.should_notify
    assert long is not None and long.should_notify
    assert long.duration_ms == 60_000
    assert long.duration_seconds == 60


def test_duplicate_start_leaves_state_unchanged(clock) -> None:
    registry = TaskRegistry(clock=clock)
    original = registry.start("deploy", "Deploy", {"env": "staging"})
    clock.advance(10)

    with pytest.raises(DuplicateTaskError) as excinfo:
        registry.start("deploy", "Deploy again")

    assert excinfo.value.task_id == "deploy"
    assert registry.list_running() == [original]
    assert registry.get("deploy").name == "Deploy"


def test_end_unknown_or_already_ended_returns_none(clock) -> None:
    registry = TaskRegistry(clock=clock)
    registry.start("one", "First")
    registry.start("two", "Second")

    assert registry.end("missing") is None
    assert registry.end("one") is not None
    assert registry.end("one") is None

    assert [task.id for task in registry.list_running()] == ["two"]


def test_cancel_removes_without_result(clock) -> None:
    registry = TaskRegistry(clock=clock)
    registry.start("job", "Job")

    assert registry.cancel("job") is True
    assert registry.cancel("job") is False
    assert registry.end("job") is None
    assert len(registry) == 0


def test_id_can_be_reused_after_end(clock) -> None:
    registry = TaskRegistry(clock=clock)
    registry.start("tests", "Run tests")
    registry.end("tests")

    registry.start("tests", "Run tests again")

    assert "tests" in registry
    assert registry.get("tests").name == "Run tests again"


def test_clock_going_backwards_clamps_duration(clock) -> None:
    registry = TaskRegistry(clock=clock)
    registry.start("odd", "Odd clock")
    clock.advance(-5)

    result = registry.end("odd")

    assert result is not None
    assert result.duration_ms == 0


def test_list_running_is_snapshot_in_start_order(clock) -> None:
    registry = TaskRegistry(clock=clock)
    registry.start("second", "B")
    clock.advance(-1)
    registry.start("first", "A")

    snapshot = registry.list_running()
    registry.cancel("first")

    assert [task.id for task in snapshot] == ["first", "second"]
    assert [task.id for task in registry.list_running()] == ["second"]


def test_metadata_is_copied(clock) -> None:
    metadata = {"branch": "main"}
    registry = TaskRegistry(clock=clock)
    task = registry.start("m", "Meta", metadata)
    metadata["branch"] = "other"

    assert task.metadata == {"branch": "main"}


def test_negative_threshold_rejected() -> None:
    with pytest.raises(ValueError):
        TaskRegistry(-1)


def test_concurrent_async_lifecycles_keep_pairing() -> None:
    registry = TaskRegistry(60_000)

    async def lifecycle(index: int) -> TaskResult | None:
        registry.start(f"task-{index}", f"Task number {index}")
        await asyncio.sleep(0)
        await asyncio.sleep(0.001 * (index % 3))
        return registry.end(f"task-{index}")

    async def run_all() -> list[TaskResult | None]:
        return await asyncio.gather(*(lifecycle(i) for i in range(50)))

    results = asyncio.run(run_all())

    assert len(results) == 50
    for index, result in enumerate(results):
        assert result is not None
        assert result.id == f"task-{index}"
        assert result.name == f"Task number {index}"
        assert result.duration_ms >= 0
    assert len(registry) == 0


def test_concurrent_threaded_lifecycles_keep_pairing() -> None:
    registry = TaskRegistry(60_000)

    def lifecycle(index: int) -> TaskResult | None:
        registry.start(f"t{index}", f"name-{index}")
        return registry.end(f"t{index}")

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lifecycle, range(200)))

    assert all(result is not None for result in results)
    assert {(result.id, result.name) for result in results} == {
        (f"t{index}", f"name-{index}") for index in range(200)
    }
    assert registry.list_running() == []


def test_duration_seconds_truncates_partial_seconds(clock) -> None:
    registry = TaskRegistry(60_000, clock=clock)
    registry.start("almost", "Almost a minute")
    clock.advance(59.6)

    result = registry.end("almost")

    assert result is not None
    assert result.duration_ms == 59_600
    assert result.duration_seconds == 59
    assert not result.should_notify
