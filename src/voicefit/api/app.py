"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import Depends, FastAPI, File, Header, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from voicefit.api.models import (
    InterpretEntryRequest,
    InterpretMealRequest,
    InterpretWorkoutSetRequest,
)
from voicefit.app_logging import configure_logging
from voicefit.containers import AppContainer
from voicefit.domain.errors import (
    ExtractionIncomplete,
    InferenceUnavailable,
    InterpretationError,
    InvalidAudio,
    InvalidTimezone,
    InvalidTranscript,
    SchemaViolation,
    TranscriptionUnavailable,
)

_STATUS_BY_ERROR: dict[type[InterpretationError], int] = {
    InvalidTranscript: 400,
    InvalidAudio: 400,
    InvalidTimezone: 400,
    ExtractionIncomplete: 422,
    TranscriptionUnavailable: 502,
    InferenceUnavailable: 503,
}

_GENERIC_ERROR = "Failed to interpret entry. Please try again."


def _get_container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_token(
    x_api_token: str | None = Header(default=None),
    container: AppContainer = Depends(_get_container),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != container.settings.api_token:
        raise HTTPException(status_code=401, detail="Unauthorized")


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InterpretationError)
    async def interpretation_error_handler(
        request: Request, exc: InterpretationError
    ) -> JSONResponse:
        status_code = error_status(exc)
        logger.warning(
            "Interpretation failed",
            extra={"path": request.url.path, "error": type(exc).__name__},
        )
        return _error_response(container, exc, exc.message, status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request."
        return JSONResponse(
            status_code=400, content={"success": False, "error": message}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail)},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unexpected error while handling request",
            extra={"path": request.url.path},
        )
        return _error_response(container, exc, _GENERIC_ERROR, 500)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/interpret/entry", dependencies=[Depends(require_token)])
    async def interpret_entry(
        body: InterpretEntryRequest,
        request: Request,
        x_user_id: UUID = Header(),
    ) -> dict[str, object]:
        """Classify a free-form entry and return a typed draft."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.entry_service.interpret_entry(
            x_user_id,
            body.transcript,
            timezone=body.timezone or state_container.settings.default_timezone,
            source=body.source,
        )
        return _success(result.model_dump(by_alias=True, mode="json"))

    @app.post("/interpret/meal", dependencies=[Depends(require_token)])
    async def interpret_meal(
        body: InterpretMealRequest,
        request: Request,
        x_user_id: UUID = Header(),
    ) -> dict[str, object]:
        """Interpret a meal transcript."""
        state_container: AppContainer = request.app.state.container
        interpretation = await state_container.meal_interpreter.interpret(
            x_user_id,
            body.transcript,
            meal_type=body.meal_type,
            eaten_at=body.eaten_at,
            timezone=body.timezone or state_container.settings.default_timezone,
        )
        return _success(interpretation.model_dump(by_alias=True, mode="json"))

    @app.post("/interpret/workout-set", dependencies=[Depends(require_token)])
    async def interpret_workout_set(
        body: InterpretWorkoutSetRequest, request: Request
    ) -> dict[str, object]:
        """Interpret a single workout set transcript."""
        state_container: AppContainer = request.app.state.container
        interpretation = await state_container.workout_interpreter.interpret(
            body.transcript
        )
        return _success(interpretation.model_dump(by_alias=True, mode="json"))

    @app.post("/transcribe", dependencies=[Depends(require_token)])
    async def transcribe(
        request: Request, audio: UploadFile | None = File(default=None)
    ) -> dict[str, object]:
        """Transcribe an uploaded audio recording."""
        state_container: AppContainer = request.app.state.container
        if audio is None:
            raise InvalidAudio
        content = await audio.read()
        transcript = await state_container.transcription_service.transcribe(
            content, audio.filename or "audio.webm"
        )
        return _success({"transcript": transcript})

    return app


def error_status(exc: InterpretationError) -> int:
    """Return the HTTP status for an interpretation failure."""
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


def _success(data: object) -> dict[str, object]:
    return {"success": True, "data": data}


def _error_response(
    container: AppContainer, exc: Exception, message: str, status_code: int
) -> JSONResponse:
    content: dict[str, object] = {
        "success": False,
        "error": _format_error(container, exc, message),
    }
    if container.settings.environment == "local" and isinstance(
        exc, SchemaViolation
    ):
        content["violations"] = [str(violation) for violation in exc.violations]
    return JSONResponse(status_code=status_code, content=content)


def _format_error(container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a user-facing error message with local debug info."""
    if container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
