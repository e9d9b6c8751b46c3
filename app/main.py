from fastapi import FastAPI

from api.v1.agents import router as agents_router
from api.v1.chat import router as chat_router
from api.v1.rooms import router as rooms_router
from app.config import get_settings
from app.core.logging import configure_logging
from app.core.middleware import RoomContextMiddleware


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Action Confirmation Service", version="0.1.0")
    app.add_middleware(RoomContextMiddleware)

    app.include_router(chat_router, prefix="/v1")
    app.include_router(rooms_router, prefix="/v1")
    app.include_router(agents_router, prefix="/v1")

    @app.get("/healthz")
    async def healthz():
        s = get_settings()
        return {
            "ok": True,
            "llm_enabled": s.LLM_ENABLED,
            "llm_model": s.LLM_MODEL,
            "db_configured": bool(s.DATABASE_URL),
        }

    return app


app = create_app()
