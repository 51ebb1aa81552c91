"""FastAPI entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.models.errors import ErrorCodes
from app.api.v1.endpoints.health import VERSION
from app.api.v1.router import router as api_router
from src.config.log_config import configure_logging
from src.config.settings import settings

DOCS_PATHS = ("/api/docs", "/api/redoc", "/api/openapi.json")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses.

    JSON endpoints get a deny-all CSP; the docs pages load Swagger UI and
    ReDoc assets from jsdelivr.
    """

    DOCS_CSP = "; ".join([
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
        "img-src 'self' data: https://cdn.jsdelivr.net https://fastapi.tiangolo.com",
        "font-src 'self' https://cdn.jsdelivr.net",
        "connect-src 'self'",
        "frame-ancestors 'none'",
    ])
    API_CSP = "default-src 'none'; frame-ancestors 'none'"
    STATIC_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        csp = self.DOCS_CSP if request.url.path in DOCS_PATHS else self.API_CSP
        response.headers["Content-Security-Policy"] = csp
        response.headers.update(self.STATIC_HEADERS)
        return response


def error_envelope(code: str, message: str, details: dict | None = None) -> dict:
    return {"error": {"code": code, "message": message, "details": details}}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render errors as the standard ``{"error": {...}}`` envelope."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        code = ErrorCodes.INVALID_REQUEST if exc.status_code < 500 else ErrorCodes.INTERNAL_ERROR
        content = error_envelope(code, str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_envelope(
            ErrorCodes.INVALID_REQUEST,
            "Request validation failed",
            {"errors": jsonable_encoder(exc.errors())},
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


app = FastAPI(
    title="GEO Score API",
    description="""
API for auditing web pages for Generative Engine Optimization (GEO) and
forecasting how their scores will evolve.

## Features

- **GEO Score**: weighted 0-100 score over ten categories with an A+ to F grade
- **Advanced Audits**: Core Web Vitals (estimated), security, mobile, accessibility, international SEO
- **Recommendations**: prioritized fixes, optionally enriched by an external model
- **Forecasting**: 30/60/90-day projections, what-if scenarios and insights
- **Content Analysis**: heuristic NLP analysis of text or HTML

## Async Processing

Audits run asynchronously:
1. `POST /api/v1/analyze` - Submit URL, get `job_id`
2. `GET /api/v1/jobs/{job_id}` - Poll for results

Audit submissions and queries have separate per-IP rate limits.
""",
    version=VERSION,
    docs_url=DOCS_PATHS[0],
    redoc_url=DOCS_PATHS[1],
    openapi_url=DOCS_PATHS[2],
    lifespan=lifespan,
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
)
app.add_middleware(SecurityHeadersMiddleware)

app.include_router(api_router, prefix="/api/v1")
