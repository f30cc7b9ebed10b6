"""Pydantic request/response schemas for the storefront API.

These are external contracts, kept separate from the protean commands and
aggregates. Quantities are plain integers so that non-positive values reach
the domain and come back as ``invalid_quantity`` errors.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    line1: str
    line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    country: str


class StatusResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    product_id: str
    quantity: int = 1

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "5b0e9a6c-2f4d-4a57-9a43-0c2b0b5f7a11",
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int


class GuestItemSchema(BaseModel):
    product_id: str
    quantity: int


class MergeGuestItemsRequest(BaseModel):
    items: list[GuestItemSchema]


class CartLineResponse(BaseModel):
    id: str
    product_id: str
    quantity: int
    unit_price: float
    subtotal: float


class CartResponse(BaseModel):
    id: str
    user_id: str
    lines: list[CartLineResponse]
    total_items: int
    total_amount: float

    @classmethod
    def from_cart(cls, cart) -> "CartResponse":
        return cls(
            id=str(cart.id),
            user_id=str(cart.user_id),
            lines=[
                CartLineResponse(
                    id=str(line.id),
                    product_id=str(line.product_id),
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=line.subtotal,
                )
                for line in cart.lines
            ],
            total_items=cart.total_items,
            total_amount=cart.total_amount,
        )


class CartCountResponse(BaseModel):
    count: int


class CartTotalResponse(BaseModel):
    total: float


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    shipping_address: AddressSchema
    payment_method: str | None = None
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "line1": "12 Harbour Road",
                        "city": "Portsmouth",
                        "postal_code": "PO1 3AX",
                        "country": "GB",
                    },
                    "payment_method": "card",
                }
            ]
        }
    }


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class RecordShipmentRequest(BaseModel):
    tracking_number: str


class OrderLineResponse(BaseModel):
    product_id: str
    name: str
    sku: str
    unit_price: float
    quantity: int
    subtotal: float


class OrderResponse(BaseModel):
    id: str
    order_number: str
    user_id: str
    status: str
    lines: list[OrderLineResponse]
    total_items: int
    total_amount: float
    shipping_address: str | None = None
    payment_method: str | None = None
    notes: str | None = None
    tracking_number: str | None = None
    order_date: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            user_id=str(order.user_id),
            status=order.status,
            lines=[
                OrderLineResponse(
                    product_id=str(line.product_id),
                    name=line.name,
                    sku=line.sku,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    subtotal=line.subtotal,
                )
                for line in order.lines
            ],
            total_items=order.total_items,
            total_amount=order.total_amount,
            shipping_address=order.shipping_address.full_address if order.shipping_address else None,
            payment_method=order.payment_method,
            notes=order.notes,
            tracking_number=order.tracking_number,
            order_date=order.order_date,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
        )


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str
    price: float
    stock_quantity: int = 0
    sku: str | None = None
    description: str | None = None
    category: str | None = None


class ChangePriceRequest(BaseModel):
    price: float


class RestockRequest(BaseModel):
    quantity: int


class ProductResponse(BaseModel):
    id: str
    name: str
    sku: str
    description: str | None = None
    category: str | None = None
    price: float
    stock_quantity: int
    active: bool

    @classmethod
    def from_product(cls, product) -> "ProductResponse":
        return cls(
            id=str(product.id),
            name=product.name,
            sku=product.sku,
            description=product.description,
            category=product.category,
            price=product.price,
            stock_quantity=product.stock_quantity,
            active=product.active,
        )
