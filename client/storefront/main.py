import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.health import router as health_router
from storefront.api.routes_cart import router as cart_router
from storefront.api.routes_payment import router as payment_router
from storefront.api.routes_session import router as session_router
from storefront.config import settings
from storefront.db import init_db
from storefront.runtime import build_runtime
from storefront.services.failures import (
    CartFailure,
    NoSession,
    PartialMutationFailure,
    TransportFailure,
    ValidationFailure,
)

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger(__name__)

FAILURE_STATUS = {
    NoSession: 200,
    ValidationFailure: 400,
    PartialMutationFailure: 409,
    TransportFailure: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    init_db()
    if not getattr(app.state, "runtime", None):
        app.state.runtime = build_runtime()

    try:
        yield
    finally:
        await app.state.runtime.aclose()


app = FastAPI(title="Storefront - Cart Client", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CartFailure)
async def cart_failure_handler(request: Request, exc: CartFailure):
    status = next((code for cls, code in FAILURE_STATUS.items() if isinstance(exc, cls)), 500)
    if status >= 500:
        log.warning("%s: %s", type(exc).__name__, exc.user_message)
    return JSONResponse(
        status_code=status,
        content={
            "notification": {
                "kind": exc.kind,
                "message": exc.user_message,
                "retryable": exc.retryable,
            },
            "cart": request.app.state.runtime.session.view(),
        },
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    log.exception("CRITICAL ERROR: %s", type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {type(exc).__name__}"},
    )


app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(session_router, tags=["session"])

app.include_router(cart_router, tags=["cart"])

app.include_router(payment_router, tags=["payment"])
