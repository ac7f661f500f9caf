import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from .config import Settings
from .database import build_engine, build_sessionmaker, init_models
from .errors import register_error_handlers
from .routes import routers
from .storage import MediaStore

logger = logging.getLogger(__name__)

def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    # One pool per app; every request borrows a session from it (see database.get_db_async)
    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_models(engine)
        logger.info("database ready")
        yield
        await engine.dispose()

    app = FastAPI(title="social-feed", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)

    media_store = MediaStore(
        settings.media_root,
        settings.media_url,
        settings.allowed_image_extensions,
        max_bytes=settings.max_upload_bytes,
    )
    media_store.ensure_root()
    app.state.media_store = media_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    for router in routers:
        app.include_router(router)

    # Uploaded images (posts and avatars)
    app.mount(settings.media_url, StaticFiles(directory=settings.media_root), name="media")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app

def run():
    import uvicorn

    uvicorn.run(
        "social_feed.main:create_app",
        factory=True,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )

if __name__ == "__main__":
    run()
