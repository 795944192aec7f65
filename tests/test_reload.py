"""Tests for the reload cycle."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from snipmate.adapters.executor import PythonExecutor
from snipmate.adapters.fs_storage import FsDocumentStore
from snipmate.adapters.yaml_codec import FrontmatterCache
from snipmate.core.evaluator import Evaluator
from snipmate.core.model import DocumentHandle
from snipmate.core.registry import Registry
from snipmate.core.reload import ReloadCoordinator
from snipmate.core.resolver import ConfigResolver

DOC = "SnipMate.md"


def fence(body: str) -> str:
    return f"```snipmate\n{body}\n```\n"


def build(store, reg: Registry, metadata=None, **kwargs) -> ReloadCoordinator:
    resolver = ConfigResolver(store, metadata or FrontmatterCache())
    return ReloadCoordinator(
        store,
        resolver,
        Evaluator(PythonExecutor(), reg),
        reg,
        path_source=lambda: DOC,
        **kwargs,
    )


@pytest.fixture
def vault():
    """Create a temporary vault with a registry and coordinator."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        reg = Registry()
        coordinator = build(FsDocumentStore(root), reg)
        yield root, reg, coordinator


def test_blocks_run_in_document_order(vault):
    """Later blocks run after earlier ones."""
    root, reg, coordinator = vault
    reg["log"] = []
    (root / DOC).write_text(fence("log.append('a')") + fence("log.append('b')"))

    report = asyncio.run(coordinator.reload())

    assert report.status == "ok"
    assert report.blocks == 2
    assert reg["log"] == ["a", "b"]


def test_failing_block_does_not_stop_siblings(vault):
    """One diagnostic for the failing block; the next block still runs."""
    root, reg, coordinator = vault
    (root / DOC).write_text(fence("raise Exception('x')") + fence("snipmate.y = 2"))

    report = asyncio.run(coordinator.reload())

    assert reg["y"] == 2
    assert len(report.diagnostics) == 1
    diag = report.diagnostics[0]
    assert diag.index == 1
    assert diag.message == "x"
    assert diag.document_path == DOC
    assert str(diag) == "Error executing snippet #1 from SnipMate.md: x"


def test_failure_is_logged(vault, caplog):
    """Block failures are logged with position and document."""
    root, reg, coordinator = vault
    (root / DOC).write_text(fence("ok = 1") + fence("1 / 0"))

    with caplog.at_level("ERROR", logger="snipmate.reload"):
        asyncio.run(coordinator.reload())

    assert "Error executing snippet #2 from SnipMate.md" in caplog.text


def test_config_is_replaced_not_merged(vault):
    """Front matter changing from {a: 1} to {b: 2} leaves exactly {b: 2}."""
    root, reg, coordinator = vault
    doc = root / DOC

    doc.write_text("---\na: 1\n---\n" + fence("seen_a = config.get('a')"))
    asyncio.run(coordinator.reload())
    assert reg["config"] == {"a": 1}
    assert reg["seen_a"] == 1

    doc.write_text("---\nb: 22\n---\n" + fence("seen_b = config.get('b')"))
    asyncio.run(coordinator.reload())
    assert reg["config"] == {"b": 22}
    assert reg["seen_b"] == 22


def test_missing_front_matter_gives_empty_config(vault):
    """No front matter means an empty config."""
    root, reg, coordinator = vault
    reg.replace_config({"old": True})
    (root / DOC).write_text(fence("x = 1"))

    asyncio.run(coordinator.reload())

    assert reg["config"] == {}


def test_absent_document_is_noop(vault):
    """Reloading a missing document changes nothing and reports nothing."""
    root, reg, coordinator = vault
    reg["keep"] = 1
    before = dict(reg)

    report = asyncio.run(coordinator.reload())

    assert report.status == "missing"
    assert report.diagnostics == []
    assert dict(reg) == before
    assert "config" not in reg


def test_directory_is_not_a_document(vault):
    """A directory at the document path is treated as absent."""
    root, reg, coordinator = vault
    (root / DOC).mkdir()

    report = asyncio.run(coordinator.reload())

    assert report.status == "missing"


def test_stale_entries_survive_reload(vault):
    """Names from removed blocks remain until overwritten."""
    root, reg, coordinator = vault
    doc = root / DOC

    doc.write_text(fence("old_helper = 1") + fence("shared = 'v1'"))
    asyncio.run(coordinator.reload())

    doc.write_text(fence("shared = 'v2'"))
    asyncio.run(coordinator.reload())

    assert reg["old_helper"] == 1
    assert reg["shared"] == "v2"


def test_explicit_document_path(vault):
    """A path argument overrides the configured one."""
    root, reg, coordinator = vault
    (root / "notes").mkdir()
    (root / "notes" / "Other.md").write_text(fence("other = True"))

    report = asyncio.run(coordinator.reload("notes/Other.md"))

    assert report.document_path == "notes/Other.md"
    assert reg["other"] is True


def test_malformed_front_matter_aborts_cycle(vault):
    """A config failure leaves the registry as it was and runs no blocks."""
    root, reg, coordinator = vault
    reg.replace_config({"previous": 1})
    (root / DOC).write_text("---\na: [unclosed\n---\n" + fence("ran = True"))

    report = asyncio.run(coordinator.reload())

    assert report.status == "config-error"
    assert reg["config"] == {"previous": 1}
    assert "ran" not in reg


class MemoryStore:
    """In-memory document store for exercising the coordinator directly."""

    def __init__(self, docs: dict[str, str]):
        self.docs = docs
        self.reads = 0
        self.gate: asyncio.Event | None = None
        self.fail_reads = False

    def resolve(self, path):
        return DocumentHandle(path=path) if path in self.docs else None

    def exists(self, path):
        return path in self.docs

    async def read_text(self, handle):
        self.reads += 1
        text = self.docs.get(handle.path)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_reads:
            raise OSError("disk on fire")
        return text

    async def create(self, path, contents):
        self.docs[path] = contents
        return DocumentHandle(path=path)


class DictMetadata:
    def __init__(self, meta):
        self.meta = meta
        self.texts: list[str | None] = []

    async def get_metadata(self, handle, text=None):
        self.texts.append(text)
        return self.meta.get(handle.path)


def test_read_error_aborts_cycle():
    """A read failure is logged and nothing is evaluated."""
    reg = Registry()
    store = MemoryStore({DOC: fence("ran = True")})
    store.fail_reads = True
    coordinator = build(store, reg, metadata=DictMetadata({DOC: {"a": 1}}))

    report = asyncio.run(coordinator.reload())

    assert report.status == "read-error"
    assert report.failed
    assert "ran" not in reg
    assert "config" not in reg


def test_async_metadata_source():
    """Metadata may come from an awaitable source."""
    reg = Registry()
    store = MemoryStore({DOC: fence("x = config['mode']")})
    coordinator = build(store, reg, metadata=DictMetadata({DOC: {"mode": "live"}}))

    asyncio.run(coordinator.reload())

    assert reg["x"] == "live"


def test_concurrent_triggers_are_coalesced():
    """A trigger during an in-flight cycle becomes one follow-up cycle."""
    reg = Registry({"runs": 0})
    store = MemoryStore({DOC: fence("runs += 1")})
    coordinator = build(store, reg, metadata=DictMetadata({}))

    async def scenario():
        store.gate = asyncio.Event()
        first = asyncio.create_task(coordinator.reload())
        await asyncio.sleep(0)
        second = await coordinator.reload()
        third = await coordinator.reload()
        store.gate.set()
        return await first, second, third

    first, second, third = asyncio.run(scenario())

    assert second.status == "coalesced"
    assert third.status == "coalesced"
    assert first.status == "ok"
    assert store.reads == 2
    assert reg["runs"] == 2


def test_without_single_flight_cycles_overlap():
    """With the guard off, overlapping triggers each run a full cycle."""
    reg = Registry({"runs": 0})
    store = MemoryStore({DOC: fence("runs += 1")})
    coordinator = build(store, reg, metadata=DictMetadata({}), single_flight=False)

    async def scenario():
        store.gate = asyncio.Event()
        tasks = [asyncio.create_task(coordinator.reload()) for _ in range(3)]
        await asyncio.sleep(0)
        store.gate.set()
        return await asyncio.gather(*tasks)

    reports = asyncio.run(scenario())

    assert [r.status for r in reports] == ["ok", "ok", "ok"]
    assert reg["runs"] == 3


def test_system_exit_in_block_is_contained(vault):
    """SystemExit from one block is a diagnostic; the next block still runs."""
    root, reg, coordinator = vault
    (root / DOC).write_text(fence("raise SystemExit(3)") + fence("y = 2"))

    report = asyncio.run(coordinator.reload())

    assert reg["y"] == 2
    assert len(report.diagnostics) == 1
    assert report.diagnostics[0].error_type == "SystemExit"


def test_metadata_sees_the_text_that_was_read():
    """Config comes from the same read as the blocks."""
    reg = Registry()
    text = "---\nmode: live\n---\n" + fence("x = 1")
    store = MemoryStore({DOC: text})
    metadata = DictMetadata({DOC: {"mode": "live"}})
    coordinator = build(store, reg, metadata=metadata)

    asyncio.run(coordinator.reload())

    assert metadata.texts == [text]
    assert store.reads == 1


def test_first_caller_gets_its_own_report():
    """The starting caller's report describes its cycle, not the follow-up."""
    reg = Registry()
    store = MemoryStore({DOC: fence("raise ValueError('first')")})
    coordinator = build(store, reg, metadata=DictMetadata({}))

    async def scenario():
        store.gate = asyncio.Event()
        first = asyncio.create_task(coordinator.reload())
        await asyncio.sleep(0)
        store.docs[DOC] = fence("ok = 1")
        second = await coordinator.reload()
        store.gate.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert second.status == "coalesced"
    assert first.status == "ok"
    assert [d.message for d in first.diagnostics] == ["first"]
    assert reg["ok"] == 1
