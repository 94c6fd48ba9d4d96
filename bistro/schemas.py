"""
Pydantic Schemas for Request/Response Validation

Wire format is camelCase (``insertedId``, ``menuItems``, ``clientSecret``)
to match the web client; Python code uses the snake_case field names.
Documents posted by the client may carry extra profile or display fields,
which are kept as-is.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every schema that travels over the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentModel(CamelModel):
    """Base for client-supplied documents stored with their extra fields."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class IdentityClaim(DocumentModel):
    """Identity payload signed into a bearer token."""
    email: str = Field(..., min_length=3, examples=["guest@bistro.com"])


class UserCreate(DocumentModel):
    """First sign-in registration; any role sent by the client is dropped."""
    email: str = Field(..., min_length=3, examples=["guest@bistro.com"])
    name: Optional[str] = Field(None, examples=["Guest"])


class MenuItemCreate(DocumentModel):
    """New menu item posted by an admin."""
    name: str = Field(..., min_length=1, examples=["Margherita Pizza"])
    category: str = Field(..., min_length=1, examples=["pizza"])
    price: float = Field(..., ge=0, examples=[12.0])
    image: Optional[str] = None
    recipe: Optional[str] = None


class CartItemCreate(DocumentModel):
    """Menu item added to a user's cart."""
    email: str = Field(..., min_length=3)
    menu_item_id: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    name: Optional[str] = None
    image: Optional[str] = None


class PaymentIntentRequest(CamelModel):
    """Checkout amount in dollars."""
    price: float = Field(..., gt=0, examples=[32.5])


class PaymentCreate(DocumentModel):
    """A completed checkout to settle."""
    email: str = Field(..., min_length=3)
    price: float = Field(..., ge=0)
    transaction_id: str = Field(..., min_length=1)
    menu_items: List[str] = Field(default_factory=list)
    cart_items: List[str] = Field(default_factory=list)
    date: Optional[datetime] = None
    status: Optional[str] = None


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class TokenResponse(CamelModel):
    token: str


class InsertResult(CamelModel):
    acknowledged: bool
    inserted_id: str


class DeleteResult(CamelModel):
    acknowledged: bool
    deleted_count: int


class UpdateResult(CamelModel):
    acknowledged: bool
    matched_count: int
    modified_count: int
    upserted_id: Optional[str] = None


class MessageResponse(CamelModel):
    message: str


class AdminCheckResponse(CamelModel):
    admin: bool


class PaymentIntentResponse(CamelModel):
    client_secret: str


class SettlementResponse(CamelModel):
    """Both effects of a settlement."""
    payment_record: InsertResult
    cart_deletion_count: int


class AdminStats(CamelModel):
    user_count: int
    product_count: int
    order_count: int
    revenue: float


class CategoryStat(CamelModel):
    category: Optional[str]
    count: int
    total: float


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    payment_service: str
    timestamp: datetime
