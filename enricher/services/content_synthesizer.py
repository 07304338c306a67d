"""Content synthesis: rewrite an article with a generative model.

Builds one bounded prompt from the original article and the extracted
reference texts, sends it to an :class:`ILLMProvider`, and returns the
generated markdown.  Every body is cut to ``char_budget`` characters before
it goes into the prompt so that the prompt size stays bounded no matter how
long the source pages are.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Awaitable, Callable

import structlog

from enricher.interfaces.llm_provider import ILLMProvider
from enricher.models.content import ExtractedContent
from enricher.utils.errors import EmptyResultError
from enricher.utils.logging import get_logger
from enricher.utils.retry import linear_backoff, with_retry
from enricher.utils.text_normalizer import truncate

DEFAULT_CHAR_BUDGET = 3000

_ROLE = (
    "You are an expert content optimizer and SEO specialist. Your task is to optimize and "
    "rewrite an article to make it more comprehensive, engaging, and SEO-friendly."
)

_REWRITE_GOALS = (
    "Match the professional tone and style of top-ranking articles",
    "Incorporate relevant insights and approaches from reference articles",
    "Maintain the original message and core ideas",
    "Add more depth, examples, and explanations where appropriate",
    "Improve readability with clear headings and paragraphs",
    "Optimize for SEO without keyword stuffing",
    "Make it comprehensive and valuable to readers",
)

_FORMAT_RULES = (
    "Clear H2 (##) and H3 (###) headings",
    "Well-structured paragraphs",
    "Bullet points or numbered lists where appropriate",
    "Bold for emphasis on key points",
)

_QUALITIES = (
    "More comprehensive and detailed",
    "Better structured with clear sections",
    "More engaging and readable",
    "SEO-optimized naturally",
    "Professional and authoritative",
)


def _bullets(items: Sequence[str], indent: str = "   ") -> str:
    return "\n".join(f"{indent}- {item}" for item in items)


def build_prompt(
    title: str,
    original_body: str,
    references: Sequence[ExtractedContent],
    char_budget: int = DEFAULT_CHAR_BUDGET,
) -> str:
    """Return the rewrite prompt for *title*.

    The original body and each reference body are truncated to
    *char_budget* characters.  References appear in order as
    ``### Reference Article N: <title>`` sections.
    """
    count = len(references)
    if count == 0:
        analyze = "the original article"
    elif count == 1:
        analyze = "the original article and the top-ranking reference article"
    else:
        analyze = f"the original article and the {count} top-ranking reference articles"

    reference_sections = "\n\n".join(
        f"### Reference Article {index}: {ref.title}\n\n{truncate(ref.content, char_budget)}"
        for index, ref in enumerate(references, start=1)
    )

    parts = [
        _ROLE,
        "## Instructions:",
        f"1. **Analyze** {analyze}\n"
        "2. **Identify** the key topics, structure, style, and depth of the reference articles\n"
        f"3. **Rewrite** the original article to:\n{_bullets(_REWRITE_GOALS)}\n"
        f"4. **Format** using markdown with:\n{_bullets(_FORMAT_RULES)}\n"
        "5. **Return ONLY the optimized article content** - no meta-commentary, "
        "no explanations, just the article",
        f"## Original Article: {title}",
        truncate(original_body, char_budget),
    ]
    if reference_sections:
        parts.append(reference_sections)
    parts.extend(
        [
            "## Your Task:",
            f'Write an improved version of "{title}" that combines the best elements from the '
            "reference articles while preserving the original message. Make it:\n"
            f"{_bullets(_QUALITIES, indent='')}",
            "Begin your optimized article now:",
        ]
    )
    return "\n\n".join(parts)


class ContentSynthesizer:
    """Generates an improved article body from an original and its references."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        char_budget: int = DEFAULT_CHAR_BUDGET,
        temperature: float = 0.7,
        max_output_tokens: int = 8192,
        max_attempts: int = 3,
        backoff_base: float = 3.0,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._llm = llm_provider
        self._char_budget = char_budget
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._max_attempts = max_attempts
        self._backoff = linear_backoff(backoff_base)
        self._sleep = sleep
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def llm_provider(self) -> ILLMProvider:
        return self._llm

    async def synthesize(
        self,
        title: str,
        original_body: str,
        references: Sequence[ExtractedContent],
    ) -> str:
        """Return the rewritten article body.

        Rate-limit and empty-result failures are retried with linear
        backoff; other provider errors propagate on the first attempt.

        Raises
        ------
        ConfigurationError, ProviderError, RateLimitError, EmptyResultError
        """
        prompt = build_prompt(title, original_body, references, self._char_budget)
        self._logger.info(
            "synthesis_started",
            title=title[:80],
            references=len(references),
            prompt_chars=len(prompt),
            provider=self._llm.get_provider_name(),
        )

        async def _complete() -> str:
            result = await self._llm.complete(
                prompt,
                temperature=self._temperature,
                max_tokens=self._max_output_tokens,
            )
            if not result or not result.strip():
                raise EmptyResultError(
                    message="Provider returned an empty article",
                    provider_name=self._llm.get_provider_name(),
                )
            return result

        retry_kwargs = {"sleep": self._sleep} if self._sleep is not None else {}
        text = await with_retry(
            _complete,
            max_attempts=self._max_attempts,
            backoff=self._backoff,
            operation_name=f"{self._llm.get_provider_name()}_synthesis",
            logger=self._logger,
            **retry_kwargs,
        )
        self._logger.info("synthesis_complete", title=title[:80], output_chars=len(text))
        return text
