"""Async tool registry built on Pydantic v2 models."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import Any

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ConfigDict, Field

from biz_assistant.types import ToolTrace

OUTPUT_PREVIEW_CHARS = 160


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[BaseModel], Awaitable[str]]
    tags: list[str] = Field(default_factory=list)

    async def invoke(self, payload: dict[str, Any]) -> str:
        data = self.args_schema.model_validate(payload)
        return await self.handler(data)


class ToolRegistry:
    """Stores tool specs and exports LangChain-compatible async tools."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}
        self._observer: Callable[[ToolTrace], None] | None = None

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    async def execute(self, name: str, payload: dict[str, Any]) -> str:
        spec = self._tools.get(name)
        if spec is None:
            raise KeyError(f"Unknown tool: {name}")
        return await self._execute_spec(spec, payload)

    def as_langchain_tools(self) -> list[StructuredTool]:
        return [
            StructuredTool.from_function(
                name=spec.name,
                description=spec.description,
                args_schema=spec.args_schema,
                coroutine=self._build_coroutine(spec),
            )
            for spec in self._tools.values()
        ]

    def specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def _build_coroutine(self, spec: ToolSpec) -> Callable[..., Awaitable[str]]:
        async def _callable(**kwargs: Any) -> str:
            return await self._execute_spec(spec, kwargs)

        return _callable

    async def _execute_spec(self, spec: ToolSpec, payload: dict[str, Any]) -> str:
        start = perf_counter()
        output = await spec.invoke(payload)
        latency_ms = (perf_counter() - start) * 1000.0

        if self._observer is not None:
            self._observer(
                ToolTrace(
                    name=spec.name,
                    argument_names=sorted(payload),
                    output_preview=output[:OUTPUT_PREVIEW_CHARS],
                    latency_ms=latency_ms,
                )
            )
        return output
