# app/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.cart import MAX_QUANTITY, PRICE_DECIMAL_PLACES, PRICE_MAX_DIGITS, Cart, CartItem


class CamelModel(BaseModel):
    """JSON w camelCase (productId, totalAmount ...), w Pythonie snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddToCartIn(CamelModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: str = Field(..., min_length=1, max_length=255)
    product_name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(
        ...,
        gt=0,
        max_digits=PRICE_MAX_DIGITS,
        decimal_places=PRICE_DECIMAL_PLACES,
        description="Cena (musi być > 0, najwyżej 2 miejsca po przecinku)",
    )
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY, description="Ilość produktu (musi być > 0)")


class UpdateQuantityIn(CamelModel):
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY, description="Nowa ilość (nie dodawana, ustawiana)")


class CartItemOut(CamelModel):
    """Schema dla pozycji w koszyku (response)."""

    id: UUID
    product_id: str
    product_name: str
    price: Decimal
    quantity: int
    total_price: Decimal
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_item(cls, item: CartItem) -> "CartItemOut":
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            price=item.price,
            quantity=item.quantity,
            total_price=item.total_price,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class CartOut(CamelModel):
    """Schema dla koszyka (response)."""

    id: UUID
    user_id: str
    items: List[CartItemOut]
    total_amount: Decimal
    item_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartOut":
        return cls(
            id=cart.id,
            user_id=cart.user_id,
            items=[CartItemOut.from_item(i) for i in cart.items],
            total_amount=cart.get_total_amount(),
            item_count=cart.get_item_count(),
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )


class MessageOut(BaseModel):
    message: str
