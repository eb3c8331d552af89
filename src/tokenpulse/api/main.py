import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from tokenpulse.api.debug import router as debug_router
from tokenpulse.api.prices import router as prices_router
from tokenpulse.api.webhook import router as webhook_router
from tokenpulse.config import settings
from tokenpulse.container import Container

logger = logging.getLogger("tokenpulse.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    yield
    await container.redis().aclose()
    engine = container.engine()
    await engine.dispose()


app = FastAPI(title="TokenPulse", version="0.1.0", lifespan=lifespan)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(webhook_router)
app.include_router(prices_router)
if settings.debug:
    app.include_router(debug_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
