"""TaskDispatcher -- entry point of the AI task pipeline.

Validates the task type, then runs PromptBuilder -> GenerationClient ->
ResponseNormalizer. Invalid task types fail before any upstream call.
Generation failures propagate unchanged; normalization never fails.
"""

from __future__ import annotations

from functools import lru_cache

import structlog

from src.meeting_ai.ai.client import GenerationClient
from src.meeting_ai.ai.normalizer import ResponseNormalizer
from src.meeting_ai.ai.prompts import PromptBuilder
from src.meeting_ai.ai.schemas import ExtractionRecord, TaskType
from src.meeting_ai.config import get_settings
from src.meeting_ai.core.exceptions import InvalidTaskType

logger = structlog.get_logger(__name__)


def parse_task_type(value: object) -> TaskType:
    """Map a raw task type to TaskType, raising InvalidTaskType otherwise."""
    if isinstance(value, TaskType):
        return value
    try:
        return TaskType(value)
    except ValueError:
        raise InvalidTaskType(value) from None


class TaskDispatcher:
    """Runs one AI task end to end.

    Args:
        prompt_builder: Builds the instruction payload per task.
        client: Gemini client; called exactly once per valid dispatch.
        normalizer: Converts raw model text into the task's result type.
    """

    def __init__(
        self,
        prompt_builder: PromptBuilder,
        client: GenerationClient,
        normalizer: ResponseNormalizer | None = None,
    ) -> None:
        self._prompt_builder = prompt_builder
        self._client = client
        self._normalizer = normalizer or ResponseNormalizer()

    async def dispatch(self, task_type: object, content: str) -> ExtractionRecord | str:
        """Run the task and return its normalized output.

        Args:
            task_type: Raw task type ("extract", "summarize" or "query").
            content: Text to analyse. Empty content is passed through as is.

        Returns:
            ExtractionRecord for extract, plain text otherwise.

        Raises:
            InvalidTaskType: Unknown task type; no upstream call is made.
            UpstreamUnavailable, MalformedUpstreamEnvelope, ServiceNotConfigured:
                Propagated from the generation client.
        """
        task = parse_task_type(task_type)
        content = content or ""

        logger.info("ai_task.dispatched", task=task.value, content_length=len(content))

        request = self._prompt_builder.build(task, content)
        raw_text = await self._client.generate(request, task=task.value)
        result = self._normalizer.normalize(task, raw_text)

        logger.info(
            "ai_task.completed",
            task=task.value,
            result_type=type(result).__name__,
            raw_length=len(raw_text),
        )
        return result


@lru_cache
def get_task_dispatcher() -> TaskDispatcher:
    """Get or create the dispatcher singleton from settings."""
    settings = get_settings()
    return TaskDispatcher(
        prompt_builder=PromptBuilder.from_settings(settings),
        client=GenerationClient.from_settings(settings),
    )
