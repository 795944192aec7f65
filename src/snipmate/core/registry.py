from typing import Any, Iterator, MutableMapping

GLOBAL_NAME = "snipmate"
CONFIG_KEY = "config"
SNIPPET_MODULE = "snipmate.snippets"


def _hidden(k: str) -> bool:
    # interpreter bookkeeping and the self-binding
    return k == GLOBAL_NAME or (k.startswith("__") and k.endswith("__"))


class Registry(MutableMapping[str, Any]):
    """
    The shared namespace snippet blocks write into.

    Blocks run with ``globals()`` set to this registry's mapping, so a
    top-level ``def total(...)`` in a block becomes ``registry["total"]``
    (and ``registry.total``). Inside a block the registry itself is
    reachable as ``snipmate``.

    - ``config`` is replaced wholesale on every reload.
    - Everything else persists until overwritten; nothing is ever cleared.
    """

    def __init__(self, initial: dict | None = None):
        object.__setattr__(self, "_d", {"__name__": SNIPPET_MODULE})
        self._d.update(initial or {})
        self._d[GLOBAL_NAME] = self

    def namespace(self) -> dict[str, Any]:
        """The live globals mapping handed to executed blocks."""
        return self._d

    # MutableMapping interface
    def __getitem__(self, k: str) -> Any:
        if _hidden(k):
            raise KeyError(k)
        return self._d[k]

    def __setitem__(self, k: str, v: Any) -> None:
        if _hidden(k):
            raise KeyError(f"{k!r} is reserved")
        self._d[k] = v

    def __delitem__(self, k: str) -> None:
        if _hidden(k):
            raise KeyError(k)
        del self._d[k]

    def __iter__(self) -> Iterator[str]:
        return (k for k in list(self._d) if not _hidden(k))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    # Attribute access, so snippets can write ``snipmate.total = ...``
    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        elif hasattr(type(self), name):
            # reads would find the method, not the entry
            raise AttributeError(
                f"{name!r} is a Registry attribute; use snipmate[{name!r}] instead"
            )
        else:
            self[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"Registry({sorted(self)!r})"

    # Convenience
    @property
    def config(self) -> dict[str, Any]:
        return self._d.get(CONFIG_KEY, {})

    def replace_config(self, config: dict[str, Any]) -> None:
        self._d[CONFIG_KEY] = dict(config)


_default: Registry | None = None


def default_registry() -> Registry:
    """Process-wide registry, created on first use and never torn down."""
    global _default
    if _default is None:
        _default = Registry()
    return _default
