"""
Forced interleavings of concurrent transfer tasks.

Gated stores hold individual operations until a test releases them, so
these tests pin down orderings the scheduler would otherwise pick freely.
"""

import asyncio

import pytest

from sharelift.core.config import MigrationConfig
from sharelift.core.types import OutcomeKind
from sharelift.transfer.coordinator import MigrationCoordinator

FILES = {"abc123.mp4": b"v" * 4096, "abc123.jpg": b"t" * 512}


async def until(predicate, timeout: float = 5.0) -> None:
    async def _poll():
        while not predicate():
            await asyncio.sleep(0)

    await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.fixture
def make_coordinator(migration_logger):
    def _make(source, destination):
        config = MigrationConfig(
            source_url="memory://", destination_url="memory://", extensions=(".mp4", ".jpg")
        )
        return MigrationCoordinator(source, destination, config, logger=migration_logger)

    return _make


class TestIndependentProgress:
    """A task never waits on its siblings"""

    @pytest.mark.asyncio
    async def test_sibling_completes_while_other_is_blocked(self, gated_stores, make_coordinator):
        gates, source, destination = gated_stores("exists:abc123.mp4", files=dict(FILES))
        run = asyncio.create_task(make_coordinator(source, destination).migrate("abc123"))

        await gates.arrived("exists:abc123.mp4")
        await until(lambda: "delete:abc123.jpg" in gates.reached)

        assert "abc123.jpg" in destination.objects
        assert "abc123.mp4" not in destination.objects
        assert not run.done()

        gates.release("exists:abc123.mp4")
        result = await run

        assert result.counts()["completed"] == 2

    @pytest.mark.asyncio
    async def test_delete_can_precede_sibling_write(self, gated_stores, make_coordinator):
        gates, source, destination = gated_stores("write:abc123.jpg", files=dict(FILES))
        run = asyncio.create_task(make_coordinator(source, destination).migrate("abc123"))

        await gates.arrived("write:abc123.jpg")
        await until(lambda: "delete:abc123.mp4" in gates.reached)
        gates.release("write:abc123.jpg")
        result = await run

        assert result.success
        assert gates.reached.index("delete:abc123.mp4") < gates.reached.index("tags:abc123.jpg")
        assert source.paths == []

    @pytest.mark.asyncio
    async def test_failure_does_not_cancel_blocked_sibling(self, gated_stores, make_coordinator):
        gates, source, destination = gated_stores("tags:abc123.mp4", files=dict(FILES))
        destination.fail_on("abc123.jpg", OSError("connection reset"))
        run = asyncio.create_task(
            make_coordinator(source, destination).migrate("abc123", raise_on_failure=False)
        )

        await gates.arrived("tags:abc123.mp4")
        await until(lambda: destination.write_counts.get("abc123.jpg") == 1)
        for _ in range(10):
            await asyncio.sleep(0)
        assert not run.done()

        gates.release("tags:abc123.mp4")
        result = await run

        assert result.outcome_for("abc123.mp4").kind is OutcomeKind.COMPLETED
        assert result.outcome_for("abc123.jpg").kind is OutcomeKind.FAILED
        assert source.paths == ["abc123.jpg"]


class TestSourceRaces:
    """The source changes between the pipeline's stages"""

    @pytest.mark.asyncio
    async def test_removed_between_exists_and_open(self, gated_stores, make_coordinator):
        gates, source, destination = gated_stores("open:abc123.mp4", files=dict(FILES))
        run = asyncio.create_task(make_coordinator(source, destination).migrate("abc123"))

        await gates.arrived("open:abc123.mp4")
        await source.delete_if_exists("abc123.mp4")
        gates.release("open:abc123.mp4")
        result = await run

        assert result.success
        assert result.outcome_for("abc123.mp4").kind is OutcomeKind.SKIPPED_NOT_FOUND
        assert "abc123.mp4" not in destination.write_counts

    @pytest.mark.asyncio
    async def test_locked_between_exists_and_open(self, gated_stores, make_coordinator):
        gates, source, destination = gated_stores("open:abc123.mp4", files=dict(FILES))
        run = asyncio.create_task(make_coordinator(source, destination).migrate("abc123"))

        await gates.arrived("open:abc123.mp4")
        source.lock("abc123.mp4")
        gates.release("open:abc123.mp4")
        result = await run

        assert result.outcome_for("abc123.mp4").kind is OutcomeKind.SKIPPED_CONFLICT
        assert result.outcome_for("abc123.jpg").kind is OutcomeKind.COMPLETED
        assert source.paths == ["abc123.mp4"]

    @pytest.mark.asyncio
    async def test_appended_between_open_and_write(self, gated_stores, make_coordinator):
        gates, source, destination = gated_stores("write:abc123.mp4", files=dict(FILES))
        run = asyncio.create_task(make_coordinator(source, destination).migrate("abc123"))

        await gates.arrived("write:abc123.mp4")
        source.put("abc123.mp4", FILES["abc123.mp4"] + b"more")
        gates.release("write:abc123.mp4")
        result = await run

        assert result.success
        assert result.outcome_for("abc123.mp4").kind is OutcomeKind.SKIPPED_CONFLICT
        assert "abc123.mp4" not in destination.objects
        assert source.get("abc123.mp4").endswith(b"more")
