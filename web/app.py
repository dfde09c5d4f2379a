"""FastAPI app for the interview tracker API."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from artifacts.config import ArtifactConfig
from artifacts.errors import ArtifactError
from artifacts.generator import ArtifactGenerator
from artifacts.scheduling import SchedulingService
from artifacts.store import ArtifactStore
from records.store import RecordStore
from web import config
from web.routes import interviews, saved_resumes

logger = logging.getLogger(__name__)


def create_app(records: RecordStore = None, artifact_config: ArtifactConfig = None,
               jwt_secret: str = None) -> FastAPI:
    """Build the app; components are attached to app.state so routes can reach them."""
    app = FastAPI(title="Interview Tracker", version="0.1.0")

    artifact_config = artifact_config or config.artifact_config()
    records = records or RecordStore(config.TRACKER_DB)
    store = ArtifactStore(artifact_config.schedule_dir)
    generator = ArtifactGenerator(artifact_config)

    app.state.records = records
    app.state.store = store
    app.state.generator = generator
    app.state.scheduler = SchedulingService(records, store, generator)
    app.state.jwt_secret = jwt_secret or config.JWT_SECRET

    app.include_router(interviews.router, prefix="/api/interviews", tags=["interviews"])
    app.include_router(saved_resumes.router, prefix="/api/saved-resumes", tags=["saved-resumes"])

    @app.exception_handler(ArtifactError)
    async def artifact_error_handler(request: Request, exc: ArtifactError):
        """Precise reason goes to the log; the client only sees the public message."""
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail, exc_info=exc)
        else:
            logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.detail)
        return JSONResponse({"error": exc.public_message}, status_code=exc.status_code)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
