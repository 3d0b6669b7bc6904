from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prompt_tools.api.errors import register_exception_handlers
from prompt_tools.api.v1 import library, prompts
from prompt_tools.core.config import settings
from prompt_tools.core.logging import configure_logging
from prompt_tools.middleware.logging import LoggingMiddleware


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Prompt Tools",
        version="0.1.0",
    )

    # CORS middleware - must be added before other middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    # API routes
    prefix = settings.API_V1_PREFIX
    app.include_router(prompts.router, prefix=prefix)
    app.include_router(library.router, prefix=prefix)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        return {"status": "ok", "environment": settings.ENVIRONMENT}

    return app


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
