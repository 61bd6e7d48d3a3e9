import logging

from fastapi import FastAPI

from backend.routes import router
from storygen.config import Settings, build_generator, load_settings
from storygen.generator import StoryGenerator

logger = logging.getLogger(__name__)


def create_app(
    generator: StoryGenerator | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    if generator is None:
        settings = settings or load_settings()
        if not settings.endpoint:
            logger.warning("AZURE_OPENAI_ENDPOINT is not set; generation requests will fail")
        generator = build_generator(settings)

    app = FastAPI(title="Story Generator")
    app.state.generator = generator
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (settings from environment / .env)
app = create_app()
