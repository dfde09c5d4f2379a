"""Saved resume routes."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from records.resumes import create_saved_resume
from web.auth import current_user
from web.routes.interviews import in_thread, read_body

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def post_saved_resume(request: Request):
    """Create a saved resume. ``company`` is stored only when given explicitly."""
    user = current_user(request)
    try:
        body = await read_body(request)
        resume = await in_thread(create_saved_resume, request.app.state.records, user["id"], body)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    logger.info("Saved resume %s for user %s", resume["id"], user["id"])
    return JSONResponse(
        {
            "id": resume["id"],
            "company": resume.get("company"),
            "jobLink": resume.get("job_link"),
            "inferredJobTitle": resume.get("inferred_job_title"),
            "inferredCompany": resume.get("inferred_company"),
            "hasOriginalPdf": bool(resume.get("resume_pdf_path")),
            "createdAt": resume.get("created_at"),
        },
        status_code=201,
    )
