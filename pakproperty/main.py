from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi_limiter import FastAPILimiter
from structlog import get_logger

from pakproperty.config import settings
from pakproperty.db import create_tables
from pakproperty.errors import PropertyError
from pakproperty.routers import admin
from pakproperty.routers import auth
from pakproperty.routers import inquiries
from pakproperty.routers import properties
from pakproperty.routers import users
from pakproperty.services.cache import close_redis_client, get_redis_client
from pakproperty.services.properties import format_errors

logger = get_logger()

app = FastAPI(title="PakProperty Listings API")
app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

@app.exception_handler(PropertyError)
async def property_error_handler(request: Request, exc: PropertyError):
    body = {"success": False, "message": exc.message}
    if exc.errors:
        body["errors"] = exc.errors
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = format_errors(exc.errors())
    logger.warning("Rejected request", path=request.url.path, errors=errors)
    return JSONResponse(status_code=400, content={"success": False, "message": "Validation failed", "errors": errors})

@app.on_event("startup")
async def startup_event():
    if settings.AUTO_CREATE_TABLES:
        await create_tables()
    redis = await get_redis_client()
    if redis is not None:
        await FastAPILimiter.init(redis)
    logger.info("Listings API started", redis=redis is not None, image_storage="supabase" if settings.SUPABASE_URL else "local")

@app.on_event("shutdown")
async def shutdown_event():
    await close_redis_client()

app.include_router(auth.router)
app.include_router(properties.router)
app.include_router(users.router)
app.include_router(inquiries.router)
app.include_router(admin.router)

if not settings.SUPABASE_URL:
    app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False), name="media")

@app.get("/health")
async def root_health():
    return "ok"
