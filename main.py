# main.py
import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.cors import CORSMiddleware
import routes
from config.cache import close_rate_limiter, init_rate_limiter
from config.settings import settings
from repository.namespaces import OUTPUTS_DIR
from service.job_service import JobService
from util.constants import InternalURIs
from util.enums import Color, Environment
from util.errors import AppError
from util.logger import init_logger

logger = logging.getLogger(__name__)


async def _real_ip(request: Request) -> str:
    if settings.TRUST_PROXY:
        fwd = request.headers.get("x-forwarded-for")
        if fwd:
            return fwd.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    init_logger()
    print(f"{Color.GREEN}Initializing...{Color.RESET}")
    service = JobService.from_settings(settings)
    fastApi.state.job_service = service

    try:
        limited = await init_rate_limiter(_real_ip)
    except Exception as e:
        print("Failed to connect to Redis:", e)
        raise

    logger.info(
        "api.start version=%s concurrency=%d retention=%ss rate_limit=%s",
        settings.API_VERSION,
        settings.MAX_CONCURRENT_JOBS,
        settings.JOB_RETENTION_SECONDS,
        limited,
    )
    print(f"{Color.BLUE}Server Started{Color.RESET}")

    try:
        yield
    finally:
        await service.shutdown()
        try:
            await close_rate_limiter()
        except Exception as e:
            print("Error closing Redis:", e)

        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(title="lua.rip API", version=settings.API_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=settings.ALLOWED_ORIGIN != "*",
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
)

# Finished scripts are downloaded straight from disk.
_outputs = os.path.join(settings.WORK_DIR, OUTPUTS_DIR)
os.makedirs(_outputs, exist_ok=True)
app.mount(InternalURIs.FILES, StaticFiles(directory=_outputs), name="files")


@app.get(InternalURIs.HEALTHZ)
async def healthz():
    return {"ok": True}


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(429)
async def ratelimit_handler(request: Request, exc):
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests. Try again later.",
        },
        headers={"Retry-After": str(settings.RATE_LIMIT_SECONDS)},
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=reload)
