"""Tool metadata management and registration.

External capabilities (file readers, web fetchers, MCP adapters, ...) are
registered here. Workers and stages pick from the registry by access level:
exploration workers and the plan stage get read-only tools, executors get
everything.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from langchain_core.tools import BaseTool


@dataclass(frozen=True)
class ToolMeta:
    """Describes access attributes for a tool."""

    name: str
    read_only: bool = False
    tags: List[str] = field(default_factory=list)


class ToolRegistry:
    """Tracks external tool instances and their metadata."""

    def __init__(self, tools: Optional[Iterable[BaseTool]] = None, meta: Optional[Iterable[ToolMeta]] = None) -> None:
        self._tools: Dict[str, BaseTool] = {}
        self._meta: Dict[str, ToolMeta] = {}
        if tools:
            for tool in tools:
                self.register_tool(tool)
        if meta:
            for item in meta:
                self.register_meta(item)

    def register_tool(self, tool: BaseTool, meta: Optional[ToolMeta] = None) -> None:
        self._tools[tool.name] = tool
        if meta is not None:
            self.register_meta(meta)

    def register_meta(self, metadata: ToolMeta) -> None:
        self._meta[metadata.name] = metadata

    def get_tool(self, name: str) -> BaseTool:
        if name not in self._tools:
            raise KeyError(f"Unknown tool: {name}")
        return self._tools[name]

    def get_meta(self, name: str) -> ToolMeta:
        # Tools registered without metadata are treated as writable.
        return self._meta.get(name) or ToolMeta(name=name)

    def list_tools(self) -> List[BaseTool]:
        return list(self._tools.values())

    def list_read_only_tools(self) -> List[BaseTool]:
        return [tool for name, tool in self._tools.items() if self.get_meta(name).read_only]

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def build_default_registry() -> ToolRegistry:
    """Registry holding the builtin tools that need no external service."""
    from .builtin.now import now

    registry = ToolRegistry()
    registry.register_tool(now, ToolMeta(name=now.name, read_only=True, tags=["builtin", "time"]))
    return registry


__all__ = ["ToolMeta", "ToolRegistry", "build_default_registry"]
