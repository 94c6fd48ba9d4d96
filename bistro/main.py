"""
FastAPI Application Entry Point

Bistro Boss ordering API.

Endpoints:
    - POST /jwt: Issue a bearer token
    - /users, /menu, /reviews, /carts: Collection CRUD
    - POST /create-payment-intent: Stripe client secret for checkout
    - /payments: Settle a checkout / payment history
    - GET /admin-stats, /order-stats: Admin dashboards
    - GET /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, List, Optional, Union

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.errors import PyMongoError

from bistro.core.config import get_settings, setup_logging
from bistro.core.exceptions import BistroError
from bistro.core.security import TokenService, get_token_service
from bistro.database import DocumentStore, connect, get_store
from bistro.middleware.rbac import (
    ADMIN_ONLY,
    AUTHENTICATED,
    RequestContext,
    ensure_owner,
    promotion_access,
)
from bistro.schemas import (
    AdminCheckResponse,
    AdminStats,
    CartItemCreate,
    CategoryStat,
    DeleteResult,
    ErrorResponse,
    HealthResponse,
    IdentityClaim,
    InsertResult,
    MenuItemCreate,
    MessageResponse,
    PaymentCreate,
    PaymentIntentRequest,
    PaymentIntentResponse,
    SettlementResponse,
    TokenResponse,
    UpdateResult,
    UserCreate,
)
from bistro.services.payment import BasePaymentService, get_payment_service
from bistro.services.reporting import ReportingAggregator
from bistro.services.resources import Resources
from bistro.services.settlement import SettlementProcessor

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    app.state.store = connect(settings)
    try:
        await app.state.store.ping()
        logger.info("MongoDB connected successfully")
    except PyMongoError as e:
        logger.error(f"MongoDB ping failed: {e}")

    payment_service = get_payment_service()
    logger.info(f"Payment Service: {payment_service.provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"Missing production config: {missing}")

    logger.info("Application ready")

    yield  # Application runs

    logger.info("Shutting down...")
    app.state.store.close()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Bistro restaurant ordering backend: menu, carts, payments and admin reports.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_resources(store: DocumentStore = Depends(get_store)) -> Resources:
    return Resources(store)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", response_class=PlainTextResponse, tags=["Root"])
async def root() -> str:
    """Liveness probe."""
    return "Bistro server is running"


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(
    store: DocumentStore = Depends(get_store),
    payment_service: BasePaymentService = Depends(get_payment_service),
) -> HealthResponse:
    """Verify the document store and the payment gateway."""
    db_status = "healthy"
    try:
        await store.ping()
    except PyMongoError as e:
        db_status = f"unhealthy: {e}"
        logger.error(f"Database health check failed: {e}")

    payment_status = "healthy" if await payment_service.health_check() else "unhealthy"
    overall = "operational" if db_status == payment_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        payment_service=payment_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# TOKENS
# =============================================================================

@app.post("/jwt", response_model=TokenResponse, tags=["Auth"])
async def issue_token(
    claim: IdentityClaim,
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    """Sign the caller's identity claim into a one-hour bearer token."""
    return TokenResponse(token=tokens.issue(claim.to_document()))


# =============================================================================
# USERS
# =============================================================================

@app.get("/users", responses=ERROR_RESPONSES, tags=["Users"])
async def list_users(
    context: RequestContext = Depends(ADMIN_ONLY),
    resources: Resources = Depends(get_resources),
) -> List[dict[str, Any]]:
    return await resources.users.list()


@app.post("/users", response_model=Union[InsertResult, MessageResponse], tags=["Users"])
async def create_user(
    user: UserCreate,
    resources: Resources = Depends(get_resources),
) -> dict[str, Any]:
    """Register on first sign-in; repeat sign-ins are a no-op."""
    return await resources.users.create_if_absent(user.to_document())


@app.get("/users/admin/{email}", response_model=AdminCheckResponse, responses=ERROR_RESPONSES, tags=["Users"])
async def check_admin(
    email: str,
    context: RequestContext = Depends(AUTHENTICATED),
    resources: Resources = Depends(get_resources),
) -> AdminCheckResponse:
    """Callers may only ask about themselves; anyone else is reported as non-admin."""
    if context.email != email:
        return AdminCheckResponse(admin=False)
    return AdminCheckResponse(admin=await resources.users.is_admin(email))


@app.patch("/users/admin/{user_id}", response_model=UpdateResult, responses=ERROR_RESPONSES, tags=["Users"])
async def promote_user(
    user_id: str,
    context: Optional[RequestContext] = Depends(promotion_access),
    resources: Resources = Depends(get_resources),
) -> dict[str, Any]:
    return await resources.users.promote(user_id)


# =============================================================================
# MENU & REVIEWS
# =============================================================================

@app.get("/menu", tags=["Menu"])
async def list_menu(resources: Resources = Depends(get_resources)) -> List[dict[str, Any]]:
    return await resources.menu.list()


@app.post("/menu", response_model=InsertResult, responses=ERROR_RESPONSES, tags=["Menu"])
async def create_menu_item(
    item: MenuItemCreate,
    context: RequestContext = Depends(ADMIN_ONLY),
    resources: Resources = Depends(get_resources),
) -> dict[str, Any]:
    return await resources.menu.create(item.to_document())


@app.delete("/menu/{item_id}", response_model=DeleteResult, responses=ERROR_RESPONSES, tags=["Menu"])
async def delete_menu_item(
    item_id: str,
    context: RequestContext = Depends(ADMIN_ONLY),
    resources: Resources = Depends(get_resources),
) -> dict[str, Any]:
    return await resources.menu.delete_by_id(item_id)


@app.get("/reviews", tags=["Reviews"])
async def list_reviews(resources: Resources = Depends(get_resources)) -> List[dict[str, Any]]:
    return await resources.reviews.list()


# =============================================================================
# CARTS
# =============================================================================

@app.get("/carts", responses=ERROR_RESPONSES, tags=["Carts"])
async def list_cart(
    email: Optional[str] = Query(None),
    context: RequestContext = Depends(AUTHENTICATED),
    resources: Resources = Depends(get_resources),
) -> List[dict[str, Any]]:
    """Cart items of the authenticated user; no email means an empty cart."""
    if not email:
        return []
    ensure_owner(context, email)
    return await resources.carts.list_for_email(email)


@app.post("/carts", response_model=InsertResult, tags=["Carts"])
async def add_to_cart(
    item: CartItemCreate,
    resources: Resources = Depends(get_resources),
) -> dict[str, Any]:
    return await resources.carts.create(item.to_document())


@app.delete("/carts/{item_id}", response_model=DeleteResult, responses=ERROR_RESPONSES, tags=["Carts"])
async def remove_from_cart(
    item_id: str,
    resources: Resources = Depends(get_resources),
) -> dict[str, Any]:
    return await resources.carts.delete_by_id(item_id)


# =============================================================================
# PAYMENTS
# =============================================================================

@app.post("/create-payment-intent", response_model=PaymentIntentResponse, responses=ERROR_RESPONSES, tags=["Payments"])
async def create_payment_intent(
    body: PaymentIntentRequest,
    context: RequestContext = Depends(AUTHENTICATED),
    payment_service: BasePaymentService = Depends(get_payment_service),
) -> PaymentIntentResponse:
    intent = await payment_service.create_payment_intent(body.price)
    logger.info(f"Payment intent {intent.payment_intent_id} for {context.email}: {intent.amount} {intent.currency}")
    return PaymentIntentResponse(client_secret=intent.client_secret)


@app.post("/payments", response_model=SettlementResponse, responses=ERROR_RESPONSES, tags=["Payments"])
async def settle_payment(
    payment: PaymentCreate,
    context: RequestContext = Depends(AUTHENTICATED),
    store: DocumentStore = Depends(get_store),
) -> dict[str, Any]:
    """Store the payment and clear the cart items it paid for."""
    return await SettlementProcessor(store).settle(payment.to_document())


@app.get("/payments", responses=ERROR_RESPONSES, tags=["Payments"])
async def payment_history(
    email: str = Query(...),
    context: RequestContext = Depends(AUTHENTICATED),
    resources: Resources = Depends(get_resources),
) -> List[dict[str, Any]]:
    ensure_owner(context, email)
    return await resources.payments.list_for_email(email)


# =============================================================================
# ADMIN DASHBOARD
# =============================================================================

@app.get("/admin-stats", response_model=AdminStats, responses=ERROR_RESPONSES, tags=["Dashboard"])
async def admin_stats(
    context: RequestContext = Depends(ADMIN_ONLY),
    store: DocumentStore = Depends(get_store),
) -> dict[str, Any]:
    return await ReportingAggregator(store).admin_stats()


@app.get("/order-stats", response_model=List[CategoryStat], responses=ERROR_RESPONSES, tags=["Dashboard"])
async def order_stats(
    context: RequestContext = Depends(ADMIN_ONLY),
    store: DocumentStore = Depends(get_store),
) -> List[dict[str, Any]]:
    return await ReportingAggregator(store).order_stats()


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(BistroError)
async def bistro_exception_handler(request: Request, exc: BistroError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.error,
            "detail": exc.message,
            **exc.extra,
        },
    )


@app.exception_handler(PyMongoError)
async def database_exception_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=502,
        content={
            "success": False,
            "error": "upstream_error",
            "detail": str(exc) if settings.debug else "Database unavailable",
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("bistro.main:app", host=settings.api_host, port=settings.api_port)
