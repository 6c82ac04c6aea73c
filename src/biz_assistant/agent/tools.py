"""Assistant operations exported as registry tools."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from biz_assistant.agent.orchestrator import AssistantOrchestrator
from biz_assistant.agent.registry import ToolRegistry, ToolSpec
from biz_assistant.types import IntentKind


class AssistantToolInput(BaseModel):
    query: str = Field(min_length=1)
    caller_id: str = Field(min_length=1)


class DomainSearchToolInput(BaseModel):
    domain: IntentKind
    query: str = Field(min_length=1)
    caller_id: str = Field(min_length=1)

    @field_validator("domain")
    @classmethod
    def _known_domain(cls, value: IntentKind) -> IntentKind:
        if value is IntentKind.UNKNOWN:
            raise ValueError("domain must name a business domain")
        return value


def register_assistant_tools(
    registry: ToolRegistry, orchestrator: AssistantOrchestrator
) -> None:
    """Register the assistant tool set.

    Tools:
    - `business_assistant`: full pipeline (actions, domain search, fallbacks).
    - `domain_search`: search path only, for a caller-chosen domain.
    """

    async def _answer(input_data: AssistantToolInput) -> str:
        result = await orchestrator.answer(input_data.query, input_data.caller_id)
        return result.response_text

    async def _domain_search(input_data: DomainSearchToolInput) -> str:
        result = await orchestrator.answer_for_domain(
            input_data.domain, input_data.query, input_data.caller_id
        )
        return result.response_text

    registry.register(
        ToolSpec(
            name="business_assistant",
            description=(
                "Answer a free-text business question (customers, sales, notes, "
                "todos, events, contracts) or point to the page for a requested action."
            ),
            args_schema=AssistantToolInput,
            handler=_answer,
            tags=["assistant"],
        )
    )
    registry.register(
        ToolSpec(
            name="domain_search",
            description="Search one business domain's records visible to the caller.",
            args_schema=DomainSearchToolInput,
            handler=_domain_search,
            tags=["search"],
        )
    )
