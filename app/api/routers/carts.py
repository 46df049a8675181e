#app/api/routers/carts.py
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.domain.errors import (
    CartError,
    CartNotFoundError,
    CartOwnershipError,
    CartValidationError,
    OptimisticConflictError,
)
from app.domain.schemas import AddToCartIn, CartOut, MessageOut, UpdateQuantityIn
from app.services.cart_service import CartService
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/carts", tags=["carts"])

_STATUS = {
    CartValidationError: 400,
    CartOwnershipError: 403,
    CartNotFoundError: 404,
    OptimisticConflictError: 409,
}


def get_service() -> CartService:
    return CartService()


def to_http(error: CartError) -> HTTPException:
    status_code = _STATUS.get(type(error), 500)
    if status_code == 500:
        logger.error(f"Unexpected cart error: {error.message}")
    return HTTPException(status_code=status_code, detail=error.message)


@router.get("", response_model=CartOut)
def get_cart(user_id: str = Query(..., alias="userId"), svc: CartService = Depends(get_service)):
    try:
        return CartOut.from_cart(svc.get_or_create_cart(user_id))
    except CartError as e:
        raise to_http(e)


@router.get("/{cart_id}", response_model=CartOut)
def get_cart_by_id(
    cart_id: UUID,
    user_id: str | None = Query(None, alias="userId"),
    svc: CartService = Depends(get_service),
):
    try:
        return CartOut.from_cart(svc.get_cart_by_id(cart_id, user_id))
    except CartError as e:
        raise to_http(e)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: AddToCartIn,
    user_id: str = Query(..., alias="userId"),
    svc: CartService = Depends(get_service),
):
    try:
        cart = svc.add_to_cart(
            user_id=user_id,
            product_id=payload.product_id,
            product_name=payload.product_name,
            price=payload.price,
            quantity=payload.quantity,
        )
        return CartOut.from_cart(cart)
    except CartError as e:
        raise to_http(e)


@router.patch("/items/{item_id}", response_model=CartOut)
def update_item_quantity(
    item_id: UUID,
    payload: UpdateQuantityIn,
    user_id: str = Query(..., alias="userId"),
    svc: CartService = Depends(get_service),
):
    try:
        return CartOut.from_cart(svc.update_item_quantity(user_id, item_id, payload.quantity))
    except CartError as e:
        raise to_http(e)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(
    item_id: UUID,
    user_id: str = Query(..., alias="userId"),
    svc: CartService = Depends(get_service),
):
    try:
        return CartOut.from_cart(svc.remove_item_from_cart(user_id, item_id))
    except CartError as e:
        raise to_http(e)


@router.delete("/items", response_model=MessageOut)
def clear_cart(user_id: str = Query(..., alias="userId"), svc: CartService = Depends(get_service)):
    try:
        svc.clear_cart(user_id)
    except CartError as e:
        raise to_http(e)
    return MessageOut(message="Cart cleared successfully")


@router.delete("", response_model=MessageOut)
def delete_cart(user_id: str = Query(..., alias="userId"), svc: CartService = Depends(get_service)):
    try:
        svc.delete_cart(user_id)
    except CartError as e:
        raise to_http(e)
    return MessageOut(message="Cart deleted successfully")
