"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.executor import PythonExecutor
from .adapters.fs_storage import FsDocumentStore
from .adapters.json_settings import JsonSettingsStore
from .adapters.yaml_codec import FrontmatterCache, YamlFrontmatter
from .config import SnipConfig, load_config
from .core.evaluator import Evaluator
from .core.registry import Registry, default_registry
from .core.reload import ReloadCoordinator
from .core.resolver import ConfigResolver
from .render import SnippetRenderer
from .settings import Settings, SettingsManager


@dataclass
class Runtime:
    """Container for all wired components."""
    store: FsDocumentStore
    settings: SettingsManager
    registry: Registry
    evaluator: Evaluator
    coordinator: ReloadCoordinator
    renderer: SnippetRenderer
    config: SnipConfig


def build_runtime(
    vault_path: Path | None = None,
    config_path: Path | None = None,
    registry: Registry | None = None,
) -> Runtime:
    """Build and wire all components for a vault."""
    config = load_config(config_path=config_path, vault_path=vault_path)

    if registry is None:
        registry = default_registry()

    store = FsDocumentStore(config.vault.root)
    settings = SettingsManager(
        JsonSettingsStore(config.vault.settings),
        defaults=Settings(document_path=config.snippets.document),
    )
    settings.load()

    # reload and render share one executor and one registry
    evaluator = Evaluator(PythonExecutor(), registry)
    resolver = ConfigResolver(store, FrontmatterCache(YamlFrontmatter()))
    coordinator = ReloadCoordinator(
        store,
        resolver,
        evaluator,
        registry,
        path_source=settings.document_path,
        tag=config.snippets.tag,
    )
    renderer = SnippetRenderer(evaluator, tag=config.snippets.tag)

    return Runtime(
        store=store,
        settings=settings,
        registry=registry,
        evaluator=evaluator,
        coordinator=coordinator,
        renderer=renderer,
        config=config,
    )
