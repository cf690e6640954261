from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.config.database import create_all
from shared.errors import StorefrontError
from shared.observability import setup_observability
from shared.responses import ErrorBody, ErrorResponse
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.auth_service import models as auth_models
from services.product_service import models as product_models
from services.cart_service import models as cart_models
from services.order_service import models as order_models

from services.auth_service.router import router as auth_router
from services.product_service.router import router as product_router
from services.cart_service.router import router as cart_router
from services.order_service.router import router as order_router
from services.payment_service.router import router as payment_router

logger = structlog.get_logger(__name__)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
}

app = FastAPI(title="Storefront", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, "storefront")

# --- SECURITY SETUP ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def _error(status_code: int, message: str, code: str, details: dict | None = None, headers=None):
    body = ErrorResponse(error=ErrorBody(message=message, code=code, details=details or None))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True), headers=headers)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Render business-rule errors into the error envelope."""
    return _error(exc.status_code, exc.message, exc.code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return _error(exc.status_code, str(exc.detail), code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details: dict[str, list[str]] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"] if part != "body")
        details.setdefault(field, []).append(err["msg"])
    return _error(400, "Validation failed", "VALIDATION_ERROR", details)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, error=repr(exc))
    return _error(500, "An unexpected error occurred", "INTERNAL_ERROR")


@app.on_event("startup")
async def startup_event():
    await create_all()


api = APIRouter(prefix="/api/v1")
api.include_router(auth_router)
api.include_router(product_router)
api.include_router(cart_router)
api.include_router(order_router)
api.include_router(payment_router)


@api.get("/health")
async def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


app.include_router(api)
