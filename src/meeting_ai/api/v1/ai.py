"""AI task endpoint.

POST /api/v1/ai runs one extract, summarize or query task against the
generation service and returns ``{"result": ...}``. Errors are rendered by
the MeetingAIError handler as ``{"error": ..., "details": ...}``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from src.meeting_ai.ai.dispatcher import TaskDispatcher
from src.meeting_ai.ai.schemas import AITaskRequest, AITaskResponse, ErrorResponse
from src.meeting_ai.api.deps import get_task_dispatcher
from src.meeting_ai.core.exceptions import MethodNotSupported

router = APIRouter(prefix="/api/v1/ai", tags=["ai"])


@router.post(
    "",
    response_model=AITaskResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def run_task(
    body: AITaskRequest,
    dispatcher: TaskDispatcher = Depends(get_task_dispatcher),
):
    """Run an AI task over the supplied content.

    ``extract`` returns the seven-field extraction record; ``summarize`` and
    ``query`` return text.
    """
    result = await dispatcher.dispatch(body.task_type, body.text)
    return AITaskResponse(result=result)


@router.api_route("", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def unsupported_method(request: Request):
    raise MethodNotSupported(request.method)
