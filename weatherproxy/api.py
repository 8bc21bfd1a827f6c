"""FastAPI surface proxying CWA 36-hour forecasts as simplified JSON."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from weatherproxy.config.loader import load_config
from weatherproxy.config.schema import ProxyConfig
from weatherproxy.errors import (
    ConfigurationError,
    ProxyError,
    UpstreamError,
    ValidationError,
)
from weatherproxy.ingest.forecast_fetcher import ForecastFetcher
from weatherproxy.models.common import utc_now_iso

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


def json_response(body: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=NO_CACHE_HEADERS)


def error_response(
    status_code: int, error: str, message: str, **extra
) -> JSONResponse:
    body = {"success": False, "error": error, "message": message}
    body.update(extra)
    return json_response(body, status_code)


def create_app(
    config: ProxyConfig | None = None,
    fetcher: ForecastFetcher | None = None,
) -> FastAPI:
    """Create the proxy app.

    ``fetcher`` defaults to one built from ``config``; tests inject one
    wired to a mocked CWA client.
    """
    if config is None:
        config = load_config()
    if fetcher is None:
        fetcher = ForecastFetcher.from_config(config)
    if not config.api_key:
        logger.warning("CWA_API_KEY is not set; weather lookups will fail")
    logger.info(
        "Initializing API app cities=%d policy=%s upstream=%s",
        len(config.cities),
        config.validation.invalid_city_policy,
        config.upstream.base_url,
    )

    app = FastAPI(
        title="CWA Weather Proxy",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.fetcher = fetcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def disable_caching(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(NO_CACHE_HEADERS)
        return response

    _register_exception_handlers(app)

    # ── Routes ──────────────────────────────────────────────────

    @app.get("/")
    def index():
        """Service info for platform liveness checks."""
        return json_response({
            "success": True,
            "message": "CWA weather proxy is running",
            "endpoints": {
                "city_weather": "/api/weather/{city} (e.g. /api/weather/臺北市)",
                "cities_list": "/api/cities",
                "health": "/api/health",
            },
        })

    @app.get("/api/health")
    def health():
        return json_response({"status": "OK", "timestamp": utc_now_iso()})

    @app.get("/api/cities")
    def cities():
        return json_response({"success": True, "cities": list(config.cities)})

    @app.get("/api/weather/{city}")
    def city_weather(city: str, request: Request):
        result = request.app.state.fetcher.fetch(city)
        return json_response({"success": True, "data": result.to_dict()})

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def handle_invalid_city(request: Request, exc: ValidationError):
        return error_response(
            400, exc.category, exc.message, validCities=exc.valid_cities
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration(request: Request, exc: ConfigurationError):
        logger.error("Configuration error on %s: %s", request.url.path, exc.message)
        return error_response(500, exc.category, exc.message)

    @app.exception_handler(UpstreamError)
    async def handle_upstream(request: Request, exc: UpstreamError):
        if exc.is_unauthorized:
            return error_response(
                401,
                "upstream_unauthorized",
                "The CWA API rejected the configured API key",
                upstreamMessage=exc.message,
            )
        return error_response(
            500, exc.category, exc.message, upstreamStatus=exc.status_code
        )

    @app.exception_handler(ProxyError)
    async def handle_proxy_error(request: Request, exc: ProxyError):
        return error_response(exc.status_code or 500, exc.category, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown paths and unsupported methods both answer 404.
        if exc.status_code in (404, 405):
            return error_response(
                404,
                "route_not_found",
                f"No route for {request.method} {request.url.path}",
            )
        return error_response(exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return error_response(400, "bad_request", "Malformed request")

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = error_response(
            500, "internal_error", "Unexpected server error"
        )
        # Rendered outside the middleware stack, so CORS is set here.
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response
