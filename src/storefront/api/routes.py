"""FastAPI routes for the storefront: cart, orders and products.

Routes are plain functions so FastAPI runs each request on its own worker
thread; the services block on per-user and per-product locks.
"""

from fastapi import APIRouter, Depends

from storefront.api.principal import Principal, get_principal, require_admin
from storefront.api.schemas import (
    AddCartItemRequest,
    AddProductRequest,
    CancelOrderRequest,
    CartCountResponse,
    CartResponse,
    CartTotalResponse,
    ChangePriceRequest,
    CheckoutRequest,
    MergeGuestItemsRequest,
    OrderResponse,
    ProductResponse,
    RecordShipmentRequest,
    RestockRequest,
    StatusResponse,
    UpdateCartItemRequest,
)
from storefront.cart.service import CartService
from storefront.catalogue.service import CatalogueService
from storefront.errors import OrderNotFound, Unauthorized
from storefront.order.service import OrderService

carts = CartService()
orders = OrderService()
catalogue = CatalogueService()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
def get_cart(principal: Principal = Depends(get_principal)) -> CartResponse:
    return CartResponse.from_cart(carts.get_or_create(principal.user_id))


@cart_router.post("/items", response_model=CartResponse)
def add_cart_item(body: AddCartItemRequest, principal: Principal = Depends(get_principal)) -> CartResponse:
    cart = carts.add_item(principal.user_id, body.product_id, body.quantity)
    return CartResponse.from_cart(cart)


@cart_router.put("/items/{line_id}", response_model=CartResponse)
def update_cart_item(
    line_id: str, body: UpdateCartItemRequest, principal: Principal = Depends(get_principal)
) -> CartResponse:
    cart = carts.update_quantity(principal.user_id, line_id, body.quantity)
    return CartResponse.from_cart(cart)


@cart_router.delete("/items/{line_id}", response_model=CartResponse)
def remove_cart_item(line_id: str, principal: Principal = Depends(get_principal)) -> CartResponse:
    return CartResponse.from_cart(carts.remove_item(principal.user_id, line_id))


@cart_router.delete("", response_model=CartResponse)
def clear_cart(principal: Principal = Depends(get_principal)) -> CartResponse:
    return CartResponse.from_cart(carts.clear(principal.user_id))


@cart_router.post("/merge", response_model=CartResponse)
def merge_guest_items(body: MergeGuestItemsRequest, principal: Principal = Depends(get_principal)) -> CartResponse:
    items = [item.model_dump() for item in body.items]
    return CartResponse.from_cart(carts.merge_guest_items(principal.user_id, items))


@cart_router.get("/count", response_model=CartCountResponse)
def cart_item_count(principal: Principal = Depends(get_principal)) -> CartCountResponse:
    return CartCountResponse(count=carts.item_count(principal.user_id))


@cart_router.get("/total", response_model=CartTotalResponse)
def cart_total(principal: Principal = Depends(get_principal)) -> CartTotalResponse:
    return CartTotalResponse(total=carts.total(principal.user_id))


@cart_router.get("/validate", response_model=StatusResponse)
def validate_cart(principal: Principal = Depends(get_principal)) -> StatusResponse:
    carts.validate_for_checkout(principal.user_id)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _visible_order(order_id: str, principal: Principal):
    order = orders.get(order_id)
    if not principal.is_admin and str(order.user_id) != principal.user_id:
        raise Unauthorized("Order belongs to another user", order_id=order_id)
    return order


@order_router.post("", status_code=201, response_model=OrderResponse)
def checkout(body: CheckoutRequest, principal: Principal = Depends(get_principal)) -> OrderResponse:
    order = orders.create_from_cart(
        principal.user_id,
        shipping_address=body.shipping_address.model_dump(),
        payment_method=body.payment_method,
        notes=body.notes,
    )
    return OrderResponse.from_order(order)


@order_router.get("", response_model=list[OrderResponse])
def list_orders(principal: Principal = Depends(get_principal)) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in orders.list_for_user(principal.user_id)]


@order_router.get("/number/{order_number}", response_model=OrderResponse)
def get_order_by_number(order_number: str, principal: Principal = Depends(get_principal)) -> OrderResponse:
    order = orders.find_by_order_number(order_number)
    if order is None:
        raise OrderNotFound(order_number)
    return OrderResponse.from_order(_visible_order(str(order.id), principal))


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, principal: Principal = Depends(get_principal)) -> OrderResponse:
    return OrderResponse.from_order(_visible_order(order_id, principal))


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: str, body: CancelOrderRequest, principal: Principal = Depends(get_principal)
) -> OrderResponse:
    owner = None if principal.is_admin else principal.user_id
    return OrderResponse.from_order(orders.cancel(order_id, reason=body.reason, user_id=owner))


@order_router.post("/{order_id}/processing", response_model=OrderResponse)
def mark_processing(order_id: str, _: Principal = Depends(require_admin)) -> OrderResponse:
    return OrderResponse.from_order(orders.mark_processing(order_id))


@order_router.post("/{order_id}/shipment", response_model=OrderResponse)
def record_shipment(
    order_id: str, body: RecordShipmentRequest, _: Principal = Depends(require_admin)
) -> OrderResponse:
    return OrderResponse.from_order(orders.mark_shipped(order_id, body.tracking_number))


@order_router.post("/{order_id}/delivery", response_model=OrderResponse)
def record_delivery(order_id: str, _: Principal = Depends(require_admin)) -> OrderResponse:
    return OrderResponse.from_order(orders.mark_delivered(order_id))


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductResponse)
def add_product(body: AddProductRequest, _: Principal = Depends(require_admin)) -> ProductResponse:
    product = catalogue.add_product(
        name=body.name,
        price=body.price,
        stock_quantity=body.stock_quantity,
        sku=body.sku,
        description=body.description,
        category=body.category,
    )
    return ProductResponse.from_product(product)


@product_router.get("/low-stock", response_model=list[ProductResponse])
def low_stock(threshold: int | None = None, _: Principal = Depends(require_admin)) -> list[ProductResponse]:
    return [ProductResponse.from_product(product) for product in catalogue.low_stock(threshold)]


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str) -> ProductResponse:
    return ProductResponse.from_product(catalogue.get(product_id))


@product_router.put("/{product_id}/price", response_model=ProductResponse)
def change_price(product_id: str, body: ChangePriceRequest, _: Principal = Depends(require_admin)) -> ProductResponse:
    return ProductResponse.from_product(catalogue.change_price(product_id, body.price))


@product_router.post("/{product_id}/deactivate", response_model=ProductResponse)
def deactivate_product(product_id: str, _: Principal = Depends(require_admin)) -> ProductResponse:
    return ProductResponse.from_product(catalogue.deactivate(product_id))


@product_router.post("/{product_id}/reactivate", response_model=ProductResponse)
def reactivate_product(product_id: str, _: Principal = Depends(require_admin)) -> ProductResponse:
    return ProductResponse.from_product(catalogue.reactivate(product_id))


@product_router.post("/{product_id}/restock", response_model=ProductResponse)
def restock_product(product_id: str, body: RestockRequest, _: Principal = Depends(require_admin)) -> ProductResponse:
    catalogue.restock(product_id, body.quantity)
    return ProductResponse.from_product(catalogue.get(product_id))
