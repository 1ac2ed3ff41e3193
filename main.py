from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from studygen.core.config import settings
from studygen.core.errors import StudyGenError
from studygen.core.logging import get_logger, setup_logging
from studygen.apis.quiz.main import router as quiz_router
from studygen.apis.flashcards.main import router as flashcards_router
from studygen.apis.matching.main import router as matching_router
from studygen.apis.title.main import router as title_router

import uvicorn
from fastapi.middleware.cors import CORSMiddleware

logger = get_logger("studygen.app")


async def _studygen_error_handler(request: Request, exc: StudyGenError) -> JSONResponse:
    logger.warning(
        "%s %s -> %s: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}"
        for e in exc.errors()
    )
    return JSONResponse(
        status_code=400, content={"error": "Invalid request body", "details": details}
    )


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app.name, version=settings.app.version)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StudyGenError, _studygen_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    app.include_router(title_router)
    app.include_router(quiz_router)
    app.include_router(flashcards_router)
    app.include_router(matching_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.app.port,
            reload=not settings.app.is_production,
        )
    except Exception as e:
        print(f"An error occurred when starting the server: {e}.")
