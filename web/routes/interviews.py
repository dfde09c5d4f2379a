"""Interview routes: scheduled resume retrieval, create/update, regeneration."""

import asyncio
import functools
import logging
import re

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from artifacts.errors import ForbiddenError, NotFoundError
from records.interviews import can_access, create_interview, update_interview
from web.auth import current_user

logger = logging.getLogger(__name__)

router = APIRouter()

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def snake_keys(body: dict) -> dict:
    """Accept both camelCase and snake_case request fields."""
    return {_CAMEL.sub("_", k).lower(): v for k, v in (body or {}).items()}


async def read_body(request: Request) -> dict:
    """JSON object body with snake_case keys; anything else is a ValueError."""
    try:
        body = await request.json()
    except ValueError as e:
        raise ValueError("Request body must be valid JSON") from e
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return snake_keys(body)


async def in_thread(fn, *args, **kwargs):
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))


def _interview_json(interview: dict) -> dict:
    return {
        "id": interview["id"],
        "userId": interview.get("user_id"),
        "meetingTitle": interview.get("meeting_title"),
        "meetingDate": interview.get("meeting_date"),
        "meetingLink": interview.get("meeting_link"),
        "interviewer": interview.get("interviewer"),
        "progress": interview.get("progress"),
        "notes": interview.get("notes"),
        "feedback": interview.get("feedback"),
        "jobDescription": interview.get("job_description"),
        "selectedResumeId": interview.get("selected_resume_id"),
        "resumeLink": interview.get("resume_link"),
        "createdAt": interview.get("created_at"),
        "updatedAt": interview.get("updated_at"),
    }


def _result_json(result: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        {"interview": _interview_json(result["interview"]), "resumeArtifact": result["resume_artifact"]},
        status_code=status_code,
    )


def _authorized_interview(request: Request, user: dict, interview_id: str) -> dict:
    interview = request.app.state.records.get_interview(interview_id)
    if interview is None:
        raise NotFoundError("interview", interview_id)
    if not can_access(user, interview):
        raise ForbiddenError(
            f"User {user['id']} ({user.get('role')}) is not owner {interview.get('user_id')} of interview {interview_id}"
        )
    return interview


@router.get("/{interview_id}/scheduled-resume-pdf")
async def get_scheduled_resume_pdf(request: Request, interview_id: str):
    """Stream the interview's current scheduled resume PDF.

    Accepts the token as ``?token=`` so the link can be opened directly in a
    browser tab, or as a Bearer header.
    """
    user = current_user(request, allow_query=True)
    interview = _authorized_interview(request, user, interview_id)
    if not interview.get("selected_resume_id"):
        raise NotFoundError("selected resume", interview_id)

    data = await in_thread(request.app.state.scheduler.load_artifact, interview)
    if data is None:
        raise NotFoundError("scheduled resume artifact", interview_id)

    logger.info("Serving scheduled resume for interview %s to user %s (%d bytes)", interview_id, user["id"], len(data))
    return Response(
        content=data,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="interview_resume_{interview_id}.pdf"',
            "Cache-Control": "no-store",
            "Pragma": "no-cache",
        },
    )


@router.get("/{interview_id}/scheduled-resume")
async def get_scheduled_resume(request: Request, interview_id: str):
    """Metadata about the scheduled resume (no PDF bytes)."""
    user = current_user(request)
    _authorized_interview(request, user, interview_id)
    info = await in_thread(request.app.state.scheduler.describe, interview_id)
    return JSONResponse(info)


@router.post("/{interview_id}/scheduled-resume/regenerate")
async def post_regenerate(request: Request, interview_id: str):
    """Re-render the artifact from the current saved resume content."""
    user = current_user(request)
    _authorized_interview(request, user, interview_id)
    link = await in_thread(request.app.state.scheduler.ensure_artifact, interview_id, regenerate=True)
    if link is None:
        raise NotFoundError("selected resume", interview_id)
    return JSONResponse({"status": "ok", "resumeLink": link})


@router.post("")
async def post_interview(request: Request):
    user = current_user(request)
    state = request.app.state
    try:
        body = await read_body(request)
        result = await in_thread(create_interview, state.records, state.scheduler, user, body)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    return _result_json(result, status_code=201)


@router.put("/{interview_id}")
async def put_interview(request: Request, interview_id: str):
    user = current_user(request)
    state = request.app.state
    try:
        body = await read_body(request)
        result = await in_thread(update_interview, state.records, state.scheduler, user, interview_id, body)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    return _result_json(result)
