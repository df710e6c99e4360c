from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from narrative_engine.core.settings import settings
from narrative_engine.db.session import init_db
from narrative_engine.routers.outcomes import router as outcomes_router

app = FastAPI(title=settings.APP_NAME)


@app.exception_handler(Exception)
async def all_exception_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=500, content={"ok": False, "error": type(exc).__name__, "detail": str(exc)})


@app.on_event("startup")
async def on_startup() -> None:
    await init_db()


@app.get("/api/v1/diag/health")
async def health():
    return {"ok": True, "env": settings.APP_ENV}


app.include_router(outcomes_router)

# Expose /metrics for Prometheus
Instrumentator().instrument(app).expose(app)
