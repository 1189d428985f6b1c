"""Tests for the LiteLLM-backed target agent."""

from unittest.mock import AsyncMock, MagicMock, patch

import litellm
import pytest

from bench_eval.agent.infrastructure.errors import (
    AgentInvocationError,
    AgentUnavailableError,
)
from bench_eval.agent.infrastructure.litellm_agent import LiteLLMAgent
from bench_eval.config.domain.agent import AgentConfig
from bench_eval.core.errors import RunFaultError
from tests.agent.fake_observer import FakeAgentObserver

_ACOMPLETION = "bench_eval.agent.infrastructure.litellm_agent.litellm.acompletion"


def _make_agent(
    system_prompt: str | None = None,
) -> tuple[LiteLLMAgent, FakeAgentObserver]:
    observer = FakeAgentObserver()
    config = AgentConfig(
        model="gpt-4o-mini",
        provider="openai",
        system_prompt=system_prompt,
        temperature=0.3,
    )
    return LiteLLMAgent(config=config, observer=observer), observer


def _make_acompletion_response(content: str | None) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


class TestSnapshot:
    def test_captures_config(self) -> None:
        agent, _ = _make_agent(system_prompt="Be brief.")

        snapshot = agent.snapshot()

        assert snapshot.model == "gpt-4o-mini"
        assert snapshot.provider == "openai"
        assert snapshot.system_prompt == "Be brief."


class TestAskSuccess:
    async def test_returns_content_and_emits_events(self) -> None:
        agent, observer = _make_agent()

        with patch(
            _ACOMPLETION, new=AsyncMock(return_value=_make_acompletion_response("42"))
        ):
            answer = await agent.ask("What is 6 x 7?")

        assert answer == "42"
        assert observer.started[0].model == "openai/gpt-4o-mini"
        assert observer.completed[0].output_chars == 2
        assert observer.failed == []

    async def test_sends_system_prompt_first(self) -> None:
        agent, _ = _make_agent(system_prompt="Be brief.")
        mock = AsyncMock(return_value=_make_acompletion_response("42"))

        with patch(_ACOMPLETION, new=mock):
            await agent.ask("What is 6 x 7?")

        kwargs = mock.call_args.kwargs
        assert kwargs["model"] == "openai/gpt-4o-mini"
        assert kwargs["temperature"] == pytest.approx(0.3)
        assert kwargs["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "What is 6 x 7?"},
        ]

    async def test_no_system_prompt(self) -> None:
        agent, _ = _make_agent()
        mock = AsyncMock(return_value=_make_acompletion_response("42"))

        with patch(_ACOMPLETION, new=mock):
            await agent.ask("q")

        assert mock.call_args.kwargs["messages"] == [{"role": "user", "content": "q"}]


class TestAskFailure:
    async def test_empty_response_is_not_retriable(self) -> None:
        agent, observer = _make_agent()

        with patch(
            _ACOMPLETION, new=AsyncMock(return_value=_make_acompletion_response(""))
        ):
            with pytest.raises(AgentInvocationError) as exc_info:
                await agent.ask("q")

        assert exc_info.value.retriable is False
        assert observer.failed[0].reason == "agent returned an empty response"

    async def test_rate_limit_is_retriable(self) -> None:
        agent, _ = _make_agent()
        error = litellm.RateLimitError(
            message="slow down", llm_provider="openai", model="gpt-4o-mini"
        )

        with patch(_ACOMPLETION, new=AsyncMock(side_effect=error)):
            with pytest.raises(AgentInvocationError) as exc_info:
                await agent.ask("q")

        assert exc_info.value.retriable is True

    async def test_bad_credentials_fault_the_run(self) -> None:
        agent, observer = _make_agent()
        error = litellm.AuthenticationError(
            message="bad key", llm_provider="openai", model="gpt-4o-mini"
        )

        with patch(_ACOMPLETION, new=AsyncMock(side_effect=error)):
            with pytest.raises(AgentUnavailableError) as exc_info:
                await agent.ask("q")

        assert isinstance(exc_info.value, RunFaultError)
        assert len(observer.failed) == 1

    async def test_unknown_error_is_not_retriable(self) -> None:
        agent, _ = _make_agent()

        with patch(_ACOMPLETION, new=AsyncMock(side_effect=ValueError("odd"))):
            with pytest.raises(AgentInvocationError) as exc_info:
                await agent.ask("q")

        assert exc_info.value.retriable is False
        assert "odd" in str(exc_info.value)
