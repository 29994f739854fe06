from __future__ import annotations
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator

from .db import init_db, async_session_maker
from .routers import admin, contact, qrcodes, validate
from .core.config import get_settings
from .core.logging import setup_logging
from .core.mailer import Mailer
from .core.redis import ping_redis, close_redis
from .services.auth_service import ensure_admin

settings = get_settings()
log = setup_logging()

# must exist before StaticFiles is mounted
settings.qr_image_path.mkdir(parents=True, exist_ok=True)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    async with async_session_maker() as db:
        await ensure_admin(db, email=settings.admin_email, password=settings.admin_password)
    app.state.mailer = Mailer(settings)
    # rate limiting fails open, so a missing Redis is only worth a warning
    if settings.rl_enabled and not await ping_redis():
        log.warning("redis not reachable at %s; rate limiting disabled until it is", settings.redis_url)
    log.info("site backend ready at %s", settings.public_base_url)
    yield
    await close_redis()

app = FastAPI(title="pyden-site", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# helmet-style hardening headers; CSP is left to the front end
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
}

@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response

@app.exception_handler(RequestValidationError)
async def bad_request(request: Request, exc: RequestValidationError):
    # every client-side input fault is a 400 on this API
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": "invalid request body"})

app.include_router(admin.router)
app.include_router(qrcodes.router)
app.include_router(validate.router)
app.include_router(contact.router)
app.mount(settings.qr_image_route, StaticFiles(directory=str(settings.qr_image_path)), name="qrcodes-img")

@app.get("/health")
async def health():
    return {"status": "ok", "service": "pyden-site"}

Instrumentator().instrument(app).expose(app)
