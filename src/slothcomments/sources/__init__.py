"""
Source adapters.

Each adapter walks source roots and yields per-file comment blocks. Adapters
are looked up by language name:

    adapter = get_adapter("go")
    files = adapter.collect(["./cmd", "./internal"])
"""

from __future__ import annotations

from slothcomments.core.errors import ConfigurationError
from slothcomments.sources.base import CommentBlock, SourceAdapter, SourceFile, SourceParseError
from slothcomments.sources.golang import GoSourceAdapter
from slothcomments.sources.python import PythonSourceAdapter

_ADAPTERS: dict[str, type[SourceAdapter]] = {
    GoSourceAdapter.name: GoSourceAdapter,
    PythonSourceAdapter.name: PythonSourceAdapter,
}


def register_adapter(adapter_class: type[SourceAdapter]) -> type[SourceAdapter]:
    """Make an adapter class available under its ``name``; usable as a decorator."""
    if not adapter_class.name:
        raise ValueError("Adapter name is required")
    _ADAPTERS[adapter_class.name] = adapter_class
    return adapter_class


def get_adapter(language: str) -> SourceAdapter:
    adapter_class = _ADAPTERS.get(language)
    if adapter_class is None:
        raise ConfigurationError(
            f"Unsupported source language '{language}'",
            details={"supported": ", ".join(sorted(_ADAPTERS))},
        )
    return adapter_class()


def list_adapters() -> list[type[SourceAdapter]]:
    return [_ADAPTERS[name] for name in sorted(_ADAPTERS)]


__all__ = [
    "CommentBlock",
    "SourceAdapter",
    "SourceFile",
    "SourceParseError",
    "GoSourceAdapter",
    "PythonSourceAdapter",
    "get_adapter",
    "list_adapters",
    "register_adapter",
]
