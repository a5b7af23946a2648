import logging
from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .errors import InputError, MedScribeError
from .interpreter import decode_json_candidate, json_candidate
from .intake import resolve_note
from .llm import CompletionProvider, build_provider
from .models import ErrorResponse, GenerateResponse, HealthResponse, NoteInput
from .pipeline import NotePipeline

logger = logging.getLogger("medscribe.api")


class SuppressHealthAccessLogs(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return "/health" not in record.getMessage()


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    access = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, SuppressHealthAccessLogs) for f in access.filters):
        access.addFilter(SuppressHealthAccessLogs())


async def _medscribe_error(request: Request, exc: MedScribeError):
    if isinstance(exc, InputError):
        logger.warning("[API-GENERATE-REJECTED] %s: %s", type(exc).__name__, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


async def _validation_error(request: Request, exc: RequestValidationError):
    logger.warning("[API-GENERATE-REJECTED] malformed request: %s", exc.errors())
    return JSONResponse(status_code=400, content={"error": "Malformed request"})


async def _unexpected_error(request: Request, exc: Exception):
    logger.exception("[API-ERROR] unhandled %s on %s", type(exc).__name__, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": MedScribeError.public_message})


def get_pipeline(request: Request) -> NotePipeline:
    return request.app.state.pipeline


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def create_app(settings: Settings | None = None, provider: CompletionProvider | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    provider = provider or build_provider(settings)

    app = FastAPI(title="MedScribe")
    app.state.settings = settings
    app.state.pipeline = NotePipeline(settings, provider)
    app.add_middleware(CORSMiddleware, allow_origins=settings.cors_origins, allow_methods=["*"], allow_headers=["*"])
    app.add_exception_handler(MedScribeError, _medscribe_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unexpected_error)

    @app.get("/health", response_model=HealthResponse)
    async def health(settings: Settings = Depends(get_settings)):
        return HealthResponse(
            provider=provider.name,
            model=settings.model_name,
            template_version=settings.template_version,
        )

    @app.post(
        "/api/generate",
        response_model=GenerateResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def generate(
        note: str | None = Form(None),
        file: UploadFile | None = File(None),
        pipeline: NotePipeline = Depends(get_pipeline),
        settings: Settings = Depends(get_settings),
    ):
        has_file = file is not None and bool(file.filename)
        note_input = NoteInput(
            typed_text=note,
            uploaded_bytes=await file.read() if has_file else None,
            declared_media_type=file.content_type if has_file else None,
            filename=file.filename if has_file else None,
        )
        logger.info(
            "[API-GENERATE-START] note_chars=%d has_file=%s media_type=%s",
            len(note or ""), has_file, note_input.declared_media_type,
        )

        note_text = resolve_note(note_input, allow_pdf=settings.allow_pdf)
        try:
            completion, outcome = await pipeline.run(note_text)
        except Exception:
            logger.exception("[API-GENERATE-ERROR] completion failed")
            raise MedScribeError()

        logger.info("[API-GENERATE-SUCCESS] outcome=%s", outcome.kind)
        return GenerateResponse(
            output=completion.raw_text,
            result=outcome,
            parsed_json=decode_json_candidate(json_candidate(outcome)),
            model=completion.model,
        )

    logger.info("MedScribe ready (provider=%s, model=%s)", provider.name, settings.model_name)
    return app


def serve(settings: Settings | None = None):
    import uvicorn
    settings = settings or Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
