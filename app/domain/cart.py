# app/domain/cart.py
"""
Agregat koszyka: Cart + CartItem.
Wszystkie zmiany pozycji idą przez metody Cart, tylko w pamięci (bez I/O).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from app.domain.errors import CartNotFoundError

# zakres kolumn cart_items: price NUMERIC(12, 2), quantity INTEGER
PRICE_MAX_DIGITS = 12
PRICE_DECIMAL_PLACES = 2
MAX_QUANTITY = 2**31 - 1


@dataclass
class CartItem:
    """
    Pozycja koszyka. id == None oznacza pozycję jeszcze niezapisaną.
    Porównanie (==) pomija znaczniki czasu, używa go diff w CartRepo.save.
    """

    product_id: str
    product_name: str
    price: Decimal
    quantity: int
    id: UUID | None = None
    cart_id: UUID | None = None
    created_at: datetime | None = field(default=None, compare=False)
    updated_at: datetime | None = field(default=None, compare=False)

    @property
    def total_price(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Cart:
    id: UUID
    user_id: str
    created_at: datetime
    updated_at: datetime
    version: int = 1
    _items: list[CartItem] = field(default_factory=list, repr=False)

    @property
    def items(self) -> tuple[CartItem, ...]:
        """Kopia tylko do odczytu."""
        return tuple(self._items)

    def add_item(self, product_id: str, product_name: str, price: Decimal, quantity: int) -> CartItem:
        """Ten sam produkt: zwiększ ilość (cena i nazwa bez zmian). Inaczej nowa pozycja."""
        existing = self._find_by_product_id(product_id)
        if existing is not None:
            existing.quantity += quantity
            return existing

        item = CartItem(
            cart_id=self.id,
            product_id=product_id,
            product_name=product_name,
            price=price,
            quantity=quantity,
        )
        self._items.append(item)
        return item

    def restore_item(self, item: CartItem) -> None:
        # tylko dla repo przy odtwarzaniu agregatu z bazy
        self._items.append(item)

    def update_item_quantity(self, item_id: UUID, quantity: int) -> CartItem:
        item = self._find_by_id(item_id)
        if item is None:
            raise CartNotFoundError(f"Cart item not found with id: {item_id}")
        item.quantity = quantity
        return item

    def remove_item(self, item_id: UUID) -> None:
        self._items = [i for i in self._items if i.id is None or i.id != item_id]

    def clear_items(self) -> None:
        self._items.clear()

    def get_total_amount(self) -> Decimal:
        return sum((i.total_price for i in self._items), Decimal("0"))

    def get_item_count(self) -> int:
        return sum(i.quantity for i in self._items)

    def is_empty(self) -> bool:
        return not self._items

    def belongs_to_user(self, user_id: str) -> bool:
        return self.user_id == user_id

    def _find_by_product_id(self, product_id: str) -> CartItem | None:
        return next((i for i in self._items if i.product_id == product_id), None)

    def _find_by_id(self, item_id: UUID) -> CartItem | None:
        return next((i for i in self._items if i.id is not None and i.id == item_id), None)
