import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from satoru.api.routes import router, error_response
from satoru.config.settings import settings
from satoru.utils.exceptions import SatoruError
from satoru.utils.http_client import http_client
from satoru.utils.logger import setup_logger, addon_logger, api_logger


# ===========================
# Logger Setup
# ===========================
setup_logger(settings.LOG_LEVEL)


# ===========================
# Custom Middleware
# ===========================
class LoguruMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            api_logger.error(f"Exception: {type(e).__name__}")
            raise
        finally:
            process_time = time.time() - start_time
            if request.url.path != "/health":
                api_logger.debug(f"{request.method} {request.url.path} - {status_code} - {process_time:.2f}s")
        return response


# ===========================
# Application Lifecycle
# ===========================
@asynccontextmanager
async def lifespan(app: FastAPI):
    yield

    await http_client.close()


# ===========================
# FastAPI Application Setup
# ===========================
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

app.add_middleware(LoguruMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


# ===========================
# Error Handling
# ===========================
@app.exception_handler(SatoruError)
async def satoru_error_handler(request: Request, exc: SatoruError):
    api_logger.error(f"{request.url.path}: {exc.message}")
    return error_response(exc.message, status_code=exc.status_code)


# ===========================
# Application Entry Point
# ===========================
if __name__ == "__main__":
    addon_logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    addon_logger.info(f"Server: http://localhost:{settings.PORT}/")
    addon_logger.info(f"Upstream: {settings.SATORU_URL}")
    addon_logger.info(f"Cache TTL: {settings.CACHE_TTL}s")
    addon_logger.info(f"Log level: {settings.LOG_LEVEL}")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.PORT,
        log_config=None
    )
