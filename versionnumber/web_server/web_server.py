"""versionnumber Web Server - read-only API over recorded builds."""

from typing import Any, Optional

from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from versionnumber.core.common import get_version_action
from versionnumber.core.models import Run
from versionnumber.errors.mapper import error_to_web_response
from versionnumber.exceptions import ResourceNotFoundError, ValidationError, VersionNumberError
from versionnumber.history.storage import HistoryStore
from versionnumber.logger import session_logger as logger


def _run_summary(run: Run) -> dict[str, Any]:
    action = get_version_action(run)
    return {
        "number": run.number,
        "timestamp": run.timestamp.isoformat(),
        "result": run.result.value if run.result else None,
        "version_number": action.version_number if action else None,
        "info": action.info.to_dict() if action else None,
    }


class VersionNumberWebServer:
    """Web server exposing job histories and recorded version numbers."""

    def __init__(
        self,
        store: HistoryStore,
        host: str = "0.0.0.0",
        port: int = 8042,
    ):
        self.store = store
        self.host = host
        self.port = port
        self.app = self._create_app()

    def _create_app(self) -> Any:
        """Create the Starlette application."""
        routes = [
            Route("/ping", endpoint=self.ping, methods=["GET"]),
            Route("/health", endpoint=self.health, methods=["GET"]),
            Route("/jobs", endpoint=self.list_jobs, methods=["GET"]),
            Route("/jobs/{job}/builds", endpoint=self.list_builds, methods=["GET"]),
            Route("/jobs/{job}/builds/{number}", endpoint=self.get_build, methods=["GET"]),
        ]

        app = Starlette(debug=False, routes=routes)

        app = CORSMiddleware(
            app,
            allow_origins=["*"],
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["*"],
        )

        return app

    def _error(self, error: VersionNumberError) -> JSONResponse:
        if isinstance(error, ResourceNotFoundError):
            status = 404
        elif isinstance(error, ValidationError):
            status = 400
        else:
            status = 500
        logger.warning("Web request failed", error_code=error.code, status=status)
        return JSONResponse(error_to_web_response(error), status_code=status)

    async def ping(self, request: Request) -> JSONResponse:
        """Health check ping endpoint."""
        return JSONResponse({"status": "ok", "service": "versionnumber-web"})

    async def health(self, request: Request) -> JSONResponse:
        """Health check endpoint."""
        return JSONResponse({
            "status": "healthy",
            "service": "versionnumber-web",
            "data_dir": str(self.store.data_dir),
        })

    async def list_jobs(self, request: Request) -> JSONResponse:
        return JSONResponse({"jobs": self.store.list_jobs()})

    async def list_builds(self, request: Request) -> JSONResponse:
        job = request.path_params["job"]
        try:
            runs = self.store.load_runs(job)
            if not runs:
                raise ResourceNotFoundError("JOB_NOT_FOUND", f"Job '{job}' has no recorded builds", {"job": job})
        except VersionNumberError as e:
            return self._error(e)
        return JSONResponse({"job": job, "builds": [_run_summary(run) for run in runs]})

    async def get_build(self, request: Request) -> JSONResponse:
        job = request.path_params["job"]
        raw_number = request.path_params["number"]
        try:
            if raw_number == "latest":
                number: Optional[int] = None
            else:
                try:
                    number = int(raw_number)
                except ValueError:
                    raise ValidationError(
                        "INVALID_BUILD_NUMBER",
                        "Build number must be an integer or 'latest'",
                        {"provided": raw_number},
                    )
            run = self.store.get_run(job, number)
        except VersionNumberError as e:
            return self._error(e)
        return JSONResponse({"job": job, **_run_summary(run)})

    def get_app(self) -> Any:
        """Return the ASGI application."""
        return self.app
