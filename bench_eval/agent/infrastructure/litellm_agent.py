"""LiteLLMAgent: target agent implementation backed by a LiteLLM chat completion."""

import time

import litellm

from bench_eval.agent.domain.observer import AgentObserver
from bench_eval.agent.domain.snapshot import AgentSnapshot
from bench_eval.agent.infrastructure.errors import (
    AgentInvocationError,
    AgentUnavailableError,
)
from bench_eval.config.domain.agent import AgentConfig

_TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    litellm.RateLimitError,
    litellm.APIConnectionError,
    litellm.ServiceUnavailableError,
    litellm.InternalServerError,
    litellm.Timeout,
)

_FATAL_ERRORS: tuple[type[Exception], ...] = (
    litellm.AuthenticationError,
    litellm.NotFoundError,
)


class LiteLLMAgent:
    """AgentInvoker that sends each question as a single-turn chat.

    One instance serves every case of a run; it holds no per-call state.
    Satisfies the AgentInvoker protocol structurally.
    """

    def __init__(self, config: AgentConfig, observer: AgentObserver) -> None:
        litellm.suppress_debug_info = True
        self._config = config
        self._observer = observer

    def snapshot(self) -> AgentSnapshot:
        return AgentSnapshot(
            model=self._config.model,
            provider=self._config.provider,
            system_prompt=self._config.system_prompt,
        )

    async def ask(self, question: str) -> str:
        """Send one question and return the assistant's text.

        Raises:
            AgentInvocationError: if the call fails (retriable for rate limits,
                connection errors and provider outages) or the reply is empty.
            AgentUnavailableError: if the credentials or model are rejected.
        """
        model = self._config.qualified_model
        self._observer.agent_invocation_started(model=model)

        messages: list[dict[str, str]] = []
        if self._config.system_prompt:
            messages.append({"role": "system", "content": self._config.system_prompt})
        messages.append({"role": "user", "content": question})

        start = time.monotonic()
        try:
            response = await litellm.acompletion(
                model=model,
                messages=messages,
                temperature=self._config.temperature,
            )
        except _FATAL_ERRORS as exc:
            self._observer.agent_invocation_failed(model=model, reason=str(exc))
            raise AgentUnavailableError(reason=str(exc)) from exc
        except _TRANSIENT_ERRORS as exc:
            self._observer.agent_invocation_failed(model=model, reason=str(exc))
            raise AgentInvocationError(reason=str(exc), retriable=True) from exc
        except Exception as exc:
            self._observer.agent_invocation_failed(model=model, reason=str(exc))
            raise AgentInvocationError(reason=str(exc)) from exc

        content: str | None = response.choices[0].message.content
        if not content:
            reason = "agent returned an empty response"
            self._observer.agent_invocation_failed(model=model, reason=reason)
            raise AgentInvocationError(reason=reason)

        self._observer.agent_invocation_completed(
            model=model,
            duration_ms=int((time.monotonic() - start) * 1000),
            output_chars=len(content),
        )
        return content
