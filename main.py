from fastapi import FastAPI
from contextlib import asynccontextmanager
from memoraize.core.config import settings
from memoraize.core.logging import setup_logging
from memoraize.apis.auth import router as auth_router
from memoraize.apis.generation.main import router as generation_router
from memoraize.apis.views.main import router as views_router

import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from memoraize.modules.views.sessions import view_sessions


@asynccontextmanager
async def lifespan(app: FastAPI):
    view_sessions.start()
    try:
        yield
    finally:
        await view_sessions.stop()


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(views_router)
    app.include_router(generation_router)

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
