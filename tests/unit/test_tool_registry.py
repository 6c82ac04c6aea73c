import asyncio

import pytest
from pydantic import BaseModel, Field, ValidationError

from biz_assistant.agent.registry import ToolRegistry, ToolSpec


class EchoInput(BaseModel):
    value: int = Field(ge=1)


async def _echo(data: EchoInput) -> str:
    return str(data.value)


def test_tool_registry_validation() -> None:
    registry = ToolRegistry()
    registry.register(
        ToolSpec(
            name="echo",
            description="echo positive int",
            args_schema=EchoInput,
            handler=_echo,
        )
    )

    assert asyncio.run(registry.execute("echo", {"value": 3})) == "3"

    with pytest.raises(ValidationError):
        asyncio.run(registry.execute("echo", {"value": 0}))

    with pytest.raises(KeyError):
        asyncio.run(registry.execute("missing", {}))


def test_duplicate_tool_registration_rejected() -> None:
    registry = ToolRegistry()
    spec = ToolSpec(
        name="echo",
        description="echo positive int",
        args_schema=EchoInput,
        handler=_echo,
    )

    registry.register(spec)
    with pytest.raises(ValueError):
        registry.register(spec)


def test_observer_records_argument_names_only() -> None:
    registry = ToolRegistry()
    registry.register(
        ToolSpec(name="echo", description="echo", args_schema=EchoInput, handler=_echo)
    )
    observed = []
    registry.set_observer(observed.append)

    asyncio.run(registry.execute("echo", {"value": 7}))
    registry.set_observer(None)

    assert len(observed) == 1
    assert observed[0].name == "echo"
    assert observed[0].argument_names == ["value"]
    assert observed[0].output_preview == "7"
    assert observed[0].latency_ms >= 0.0


def test_langchain_export_runs_async_handler() -> None:
    registry = ToolRegistry()
    registry.register(
        ToolSpec(name="echo", description="echo", args_schema=EchoInput, handler=_echo)
    )

    [tool] = registry.as_langchain_tools()

    assert tool.name == "echo"
    assert asyncio.run(tool.ainvoke({"value": 5})) == "5"
