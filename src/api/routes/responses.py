"""
Survey Response Routes - store, list, aggregate and delete responses.

Endpoints:
- POST   /responses         : store one submission
- GET    /responses         : filtered, paginated listing (oldest first)
- GET    /responses/stats   : totals and time range
- DELETE /responses/{name}  : remove every response for a participant
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from starlette.concurrency import run_in_threadpool

from src.api.dependencies import get_survey_repository, read_json_body
from src.core.exceptions import ValidationError
from src.core.logging_config import get_logger
from src.models.chat import ErrorResponse
from src.models.survey import ListFilter
from src.services.survey_repository import INVALID_RESPONSE_FORMAT, SurveyRepository

logger = get_logger(__name__)

router = APIRouter(
    prefix="/responses",
    tags=["Responses"],
    responses={
        400: {"model": ErrorResponse, "description": "Malformed request"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


@router.post("", summary="Store an onboarding survey response")
async def submit_response(
    request: Request,
    repository: SurveyRepository = Depends(get_survey_repository),
) -> dict:
    """
    Store ``{name, responses: {teachLLMs?, syntheticStudents?}}``.

    The body is validated by the repository so that every malformed
    shape maps to the same 400 body.
    """
    body = await read_json_body(request)
    if not isinstance(body, dict):
        raise ValidationError(INVALID_RESPONSE_FORMAT)

    await run_in_threadpool(repository.write, body.get("name"), body.get("responses"))
    return {"success": True}


@router.get("", summary="List stored responses, oldest first")
def list_responses(
    limit: int = Query(100, ge=0, description="Maximum number of responses to return"),
    offset: int = Query(0, ge=0, description="Matching responses to skip"),
    since: int = Query(0, ge=0, description="Only responses at or after this timestamp (ms)"),
    name: Optional[str] = Query(None, description="Only responses from this participant"),
    repository: SurveyRepository = Depends(get_survey_repository),
) -> dict:
    page = repository.list(ListFilter(limit=limit, offset=offset, since=since, name=name))
    return page.to_dict()


@router.get("/stats", summary="Aggregate statistics over all responses")
def response_stats(
    repository: SurveyRepository = Depends(get_survey_repository),
) -> dict:
    return repository.stats().to_dict()


@router.delete("", summary="Rejected: participant name missing", include_in_schema=False)
@router.delete("/", summary="Rejected: participant name missing", include_in_schema=False)
def delete_without_name() -> dict:
    raise ValidationError("Name parameter is required", field="name")


@router.delete("/{name}", summary="Delete every response for a participant")
def delete_responses(
    name: str,
    repository: SurveyRepository = Depends(get_survey_repository),
) -> dict:
    if not name.strip():
        raise ValidationError("Name parameter is required", field="name")

    deleted = repository.delete_by_name(name)
    return {
        "success": True,
        "deleted": deleted,
        "message": f"Deleted {deleted} responses for {name}",
    }
