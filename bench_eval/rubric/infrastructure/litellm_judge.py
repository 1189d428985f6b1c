"""LiteLLMJudge: LLM judge implementation using LiteLLM for structured scoring."""

import time

import litellm

from bench_eval.rubric.domain.judge import JudgeVerdict
from bench_eval.rubric.domain.observer import JudgeObserver
from bench_eval.rubric.infrastructure.errors import JudgeInvocationError

_DEFAULT_SYSTEM_ROLE = """\
You are an expert evaluation judge. Your task is to score how well an AI output \
meets the given criteria.

Scoring rules:
- Score 1.0: The output fully satisfies the criteria.
- Score 0.0: The output completely fails to meet the criteria.
- Use intermediate values (e.g. 0.3, 0.5, 0.7) for partial matches.

Respond with a JSON object containing "score" (number 0-1) and "reason" \
(brief explanation).
"""


def build_judge_prompt(criteria: str, actual: str, expected: str | None) -> str:
    parts = [f"[Criteria]\n{criteria}", f"[Output]\n{actual}"]
    if expected:
        parts.append(f"[Expected]\n{expected}")
    return "\n\n".join(parts)


class LiteLLMJudge:
    """LlmJudge implementation that delegates to an LLM via LiteLLM.

    ``default_model`` is used when the rubric does not name a model.
    Satisfies the LlmJudge protocol structurally.
    """

    def __init__(
        self,
        default_model: str,
        observer: JudgeObserver,
        temperature: float = 0.0,
    ) -> None:
        litellm.suppress_debug_info = True
        self._default_model = default_model
        self._observer = observer
        self._temperature = temperature

    async def judge(
        self,
        criteria: str,
        actual: str,
        expected: str | None,
        model: str | None,
        system_role: str | None,
    ) -> JudgeVerdict:
        """Invoke the LLM judge and return its JudgeVerdict.

        Raises:
            JudgeInvocationError: if the LLM call fails or the response cannot
                be parsed into a JudgeVerdict.
        """
        model = model or self._default_model
        self._observer.judge_scoring_started(model=model)

        start = time.monotonic()
        try:
            response = await litellm.acompletion(
                model=model,
                temperature=self._temperature,
                response_format=JudgeVerdict,
                messages=[
                    {"role": "system", "content": system_role or _DEFAULT_SYSTEM_ROLE},
                    {
                        "role": "user",
                        "content": build_judge_prompt(criteria, actual, expected),
                    },
                ],
            )
        except Exception as exc:
            reason = str(exc)
            self._observer.judge_scoring_failed(model=model, reason=reason)
            raise JudgeInvocationError(reason=reason) from exc

        duration_ms = int((time.monotonic() - start) * 1000)

        raw_content: str = response.choices[0].message.content
        try:
            verdict = JudgeVerdict.model_validate_json(raw_content)
        except Exception as exc:
            reason = f"Failed to parse judge response: {exc}"
            self._observer.judge_scoring_failed(model=model, reason=reason)
            raise JudgeInvocationError(reason=reason) from exc

        self._observer.judge_scoring_completed(
            model=model, duration_ms=duration_ms, score=verdict.score
        )
        return verdict
