# app/repos/cart_repo.py
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.cart import Cart, CartItem
from app.domain.errors import CartStateError, OptimisticConflictError
from app.utils.clock import SystemClock
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CartRepo:
    """
    Mapowanie agregatu Cart na wiersze carts / cart_items.
    Nie robi commit - granica transakcji należy do wywołującego (CartService).
    """

    def __init__(self, db: Session, clock: SystemClock | None = None):
        self.db = db
        self.clock = clock or SystemClock()

    def create(self, user_id: str) -> Cart:
        now = self.clock.now()
        model = CartModel(user_id=user_id, version=1, created_at=now, updated_at=now)
        self.db.add(model)
        self.db.flush()

        logger.info(f"Created cart {model.id} for user {user_id}")
        return Cart(id=model.id, user_id=user_id, created_at=now, updated_at=now, version=1)

    def find_by_id(self, cart_id: UUID) -> Cart | None:
        model = self.db.execute(
            select(CartModel).where(CartModel.id == cart_id)
        ).scalar_one_or_none()
        return self._load_cart(model) if model else None

    def find_by_user_id(self, user_id: str) -> Cart | None:
        # user może mieć kilka koszyków, bierzemy najnowszy
        model = self.db.execute(
            select(CartModel)
            .where(CartModel.user_id == user_id)
            .order_by(CartModel.created_at.desc())
            .limit(1)
        ).scalar_one_or_none()
        return self._load_cart(model) if model else None

    def exists(self, cart_id: UUID) -> bool:
        count = self.db.execute(
            select(func.count()).select_from(CartModel).where(CartModel.id == cart_id)
        ).scalar_one()
        return count > 0

    def save(self, cart: Cart) -> bool:
        """
        Diff agregatu z wierszami w bazie:
        - pozycja bez id -> INSERT (id i timestampy wracają na obiekt)
        - pozycja z id różna od zapisanej -> UPDATE nazwy/ceny/ilości
        - zapisane id nieobecne w agregacie -> jeden DELETE ... IN (...)
        Jeśli cokolwiek się zmieniło: updated_at + version koszyka (warunek na starą wersję).
        Zwraca True gdy był jakikolwiek zapis.
        """
        if not self.exists(cart.id):
            raise CartStateError(f"Cannot save items for non-existent cart: {cart.id}")

        existing = {item.id: item for item in self._find_items(cart.id)}
        current = cart.items

        inserted = updated = 0
        for item in current:
            if item.id is None:
                self._insert_item(cart.id, item)
                inserted += 1
            elif item != existing.get(item.id):
                self._update_item(item)
                updated += 1

        current_ids = {item.id for item in current if item.id is not None}
        stale_ids = [item_id for item_id in existing if item_id not in current_ids]
        self._delete_items(stale_ids)

        if not (inserted or updated or stale_ids):
            logger.debug(f"Cart {cart.id} unchanged, nothing to save")
            return False

        self._touch_cart(cart)
        logger.info(
            f"Saved cart {cart.id}: inserted={inserted} updated={updated} "
            f"deleted={len(stale_ids)} version={cart.version}"
        )
        return True

    def delete_by_id(self, cart_id: UUID) -> None:
        # ręczne kaskadowe usuwanie - najpierw pozycje, potem koszyk
        self.db.execute(delete(CartItemModel).where(CartItemModel.cart_id == cart_id))
        self.db.execute(delete(CartModel).where(CartModel.id == cart_id))
        logger.info(f"Deleted cart {cart_id}")

    def _load_cart(self, model: CartModel) -> Cart:
        cart = Cart(
            id=model.id,
            user_id=model.user_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
            version=model.version,
        )
        for item in self._find_items(model.id):
            cart.restore_item(item)
        return cart

    def _find_items(self, cart_id: UUID) -> list[CartItem]:
        rows = self.db.execute(
            select(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.created_at.asc())
        ).scalars().all()
        return [self._to_item(row) for row in rows]

    def _insert_item(self, cart_id: UUID, item: CartItem) -> None:
        now = self.clock.now()
        model = CartItemModel(
            cart_id=cart_id,
            product_id=item.product_id,
            product_name=item.product_name,
            price=item.price,
            quantity=item.quantity,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.flush()

        item.id = model.id
        item.cart_id = cart_id
        item.created_at = now
        item.updated_at = now

    def _update_item(self, item: CartItem) -> None:
        now = self.clock.now()
        result = self.db.execute(
            update(CartItemModel)
            .where(CartItemModel.id == item.id)
            .values(
                product_name=item.product_name,
                price=item.price,
                quantity=item.quantity,
                updated_at=now,
            )
        )
        # pozycję usunął ktoś inny w międzyczasie
        if result.rowcount == 0:
            raise OptimisticConflictError(f"Cart item {item.id} was removed concurrently")
        item.updated_at = now

    def _delete_items(self, item_ids: list[UUID]) -> None:
        if not item_ids:
            return
        self.db.execute(delete(CartItemModel).where(CartItemModel.id.in_(item_ids)))

    def _touch_cart(self, cart: Cart) -> None:
        now = self.clock.now()
        # optimistic locking: update set version = v+1 where id = ? and version = v
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart.id, CartModel.version == cart.version)
            .values(updated_at=now, version=cart.version + 1)
        )
        if result.rowcount == 0:
            raise OptimisticConflictError(
                f"Cart {cart.id} was modified concurrently (expected version {cart.version})"
            )
        cart.updated_at = now
        cart.version += 1

    @staticmethod
    def _to_item(row: CartItemModel) -> CartItem:
        return CartItem(
            id=row.id,
            cart_id=row.cart_id,
            product_id=row.product_id,
            product_name=row.product_name,
            price=row.price,
            quantity=row.quantity,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
