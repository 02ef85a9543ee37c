"""
Pytest configuration and shared fixtures for sharelift tests
"""

import asyncio
import logging

import pytest

from sharelift.core.config import MigrationConfig
from sharelift.monitoring.logging import MigrationLogger
from sharelift.storage.backends.memory import InMemoryDestinationStore, InMemorySourceStore
from sharelift.transfer.coordinator import MigrationCoordinator

# ============================================
# AUTO-USE FIXTURES
# ============================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """
    Keep tests hermetic: no SHARELIFT_* variables leak in from the shell,
    and no .env file is picked up from the working directory.
    """
    import os

    for name in list(os.environ):
        if name.startswith("SHARELIFT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


# ============================================
# STORES AND COORDINATOR
# ============================================


@pytest.fixture
def source():
    return InMemorySourceStore()


@pytest.fixture
def destination():
    return InMemoryDestinationStore(key_prefix="videos/", chunk_size=64 * 1024)


@pytest.fixture
def config():
    return MigrationConfig(
        source_url="memory://",
        destination_url="memory://",
        extensions=(".mp4", ".jpg"),
    )


@pytest.fixture
def migration_logger():
    return MigrationLogger(logger=logging.getLogger("sharelift.tests"))


@pytest.fixture
def coordinator(source, destination, config, migration_logger):
    return MigrationCoordinator(source, destination, config, logger=migration_logger)


# ============================================
# GATED STORES (forcing interleavings)
# ============================================


class Gates:
    """
    Named asyncio events that block store operations until released.

    A gate name is ``"<operation>:<path>"``, e.g. ``"exists:abc123.mp4"``.
    ``reached`` records the order in which operations arrived at their gate.
    """

    def __init__(self, *names: str):
        self._events = {name: asyncio.Event() for name in names}
        self.reached: list[str] = []
        self._arrivals: dict[str, asyncio.Event] = {name: asyncio.Event() for name in names}

    async def pass_through(self, name: str) -> None:
        self.reached.append(name)
        if name in self._arrivals:
            self._arrivals[name].set()
        if name in self._events:
            await self._events[name].wait()

    def release(self, name: str) -> None:
        self._events[name].set()

    async def arrived(self, name: str) -> None:
        await asyncio.wait_for(self._arrivals[name].wait(), timeout=5)


class GatedSourceStore(InMemorySourceStore):
    """In-memory source whose operations wait on gates"""

    def __init__(self, gates: Gates, files=None):
        super().__init__(files)
        self.gates = gates

    async def exists(self, path):
        await self.gates.pass_through(f"exists:{path}")
        return await super().exists(path)

    async def open_read(self, path, cancel):
        await self.gates.pass_through(f"open:{path}")
        return await super().open_read(path, cancel)

    async def delete_if_exists(self, path):
        await self.gates.pass_through(f"delete:{path}")
        return await super().delete_if_exists(path)


class GatedDestinationStore(InMemoryDestinationStore):
    """In-memory destination whose writes and tag calls wait on gates"""

    def __init__(self, gates: Gates, key_prefix: str = ""):
        super().__init__(key_prefix=key_prefix)
        self.gates = gates

    async def write_stream(self, key, stream, **kwargs):
        await self.gates.pass_through(f"write:{key}")
        return await super().write_stream(key, stream, **kwargs)

    async def set_tags(self, key, tags):
        await self.gates.pass_through(f"tags:{key}")
        return await super().set_tags(key, tags)


@pytest.fixture
def gates_factory():
    return Gates


@pytest.fixture
def gated_stores():
    """Factory building a (gates, source, destination) triple"""

    def _build(*gate_names: str, files=None):
        gates = Gates(*gate_names)
        return gates, GatedSourceStore(gates, files), GatedDestinationStore(gates)

    return _build
