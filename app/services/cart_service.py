from decimal import Decimal, InvalidOperation
from typing import Callable, TypeVar
from uuid import UUID

from sqlalchemy.orm import sessionmaker

from app.data.database import SessionLocal, transaction
from app.domain.cart import MAX_QUANTITY, PRICE_DECIMAL_PLACES, PRICE_MAX_DIGITS, Cart
from app.domain.errors import CartNotFoundError, CartOwnershipError, CartValidationError
from app.repos.cart_repo import CartRepo
from app.utils.clock import SystemClock
from app.utils.logging import get_logger
from app.utils.retry import run_with_conflict_retry

logger = get_logger(__name__)

T = TypeVar("T")

# 0.01 i 10^10 dla NUMERIC(12, 2)
PRICE_STEP = Decimal(1).scaleb(-PRICE_DECIMAL_PLACES)
PRICE_LIMIT = Decimal(10) ** (PRICE_MAX_DIGITS - PRICE_DECIMAL_PLACES)


class CartService:
    """
    Use case'y koszyka. Każdy = jedna jednostka pracy:
    wczytaj agregat -> zmień w pamięci -> CartRepo.save -> commit.
    Cała jednostka jest powtarzana przy OptimisticConflictError (retry z backoffem).
    """

    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        clock: SystemClock | None = None,
        **retry_policy,
    ):
        self.session_factory = session_factory
        self.clock = clock or SystemClock()
        # attempts / initial_delay / multiplier / jitter / sleep, patrz app.utils.retry
        self.retry_policy = retry_policy

    #query
    def get_or_create_cart(self, user_id: str) -> Cart:
        self._require_text(user_id, "User ID is required")
        return self._run(lambda repo: self._find_or_create(repo, user_id))

    def get_cart_by_id(self, cart_id: UUID, user_id: str | None = None) -> Cart:
        def work(repo: CartRepo) -> Cart:
            cart = repo.find_by_id(cart_id)
            if cart is None:
                raise CartNotFoundError(f"Cart not found with id: {cart_id}")
            if user_id is not None:
                self._check_owner(cart, user_id)
            return cart

        return self._run(work)

    #commands
    def add_to_cart(
        self,
        user_id: str,
        product_id: str,
        product_name: str,
        price: Decimal,
        quantity: int,
    ) -> Cart:
        # walidacja przed jakimkolwiek I/O
        self._require_text(user_id, "User ID is required")
        self._require_quantity(quantity)
        price = self._to_decimal(price)
        self._require_positive(price, "Price must be greater than 0")
        self._require_storable_price(price)
        self._require_text(product_id, "Product ID is required")
        self._require_text(product_name, "Product name is required")

        def work(repo: CartRepo) -> Cart:
            cart = self._find_or_create(repo, user_id)
            item = cart.add_item(product_id, product_name, price, quantity)
            # suma z tym co już jest w koszyku też musi zmieścić się w INTEGER
            if item.quantity > MAX_QUANTITY:
                raise CartValidationError(
                    f"Quantity of product {product_id} cannot exceed {MAX_QUANTITY}"
                )
            repo.save(cart)
            return cart

        cart = self._run(work)
        logger.info(f"Product {product_id} x{quantity} added to cart {cart.id}")
        return cart

    def update_item_quantity(self, user_id: str, item_id: UUID, quantity: int) -> Cart:
        self._require_text(user_id, "User ID is required")
        self._require_quantity(quantity)

        def work(repo: CartRepo) -> Cart:
            cart = self._find_for_user(repo, user_id)
            cart.update_item_quantity(item_id, quantity)
            repo.save(cart)
            return cart

        return self._run(work)

    def remove_item_from_cart(self, user_id: str, item_id: UUID) -> Cart:
        self._require_text(user_id, "User ID is required")

        def work(repo: CartRepo) -> Cart:
            cart = self._find_for_user(repo, user_id)
            cart.remove_item(item_id)
            repo.save(cart)
            return cart

        return self._run(work)

    def clear_cart(self, user_id: str) -> None:
        self._require_text(user_id, "User ID is required")

        def work(repo: CartRepo) -> None:
            cart = self._find_for_user(repo, user_id)
            cart.clear_items()
            repo.save(cart)

        self._run(work)

    def delete_cart(self, user_id: str) -> None:
        self._require_text(user_id, "User ID is required")

        def work(repo: CartRepo) -> None:
            cart = self._find_for_user(repo, user_id)
            repo.delete_by_id(cart.id)

        self._run(work)

    def _run(self, work: Callable[[CartRepo], T]) -> T:
        # każda próba = nowa sesja i nowa transakcja
        def attempt() -> T:
            with transaction(self.session_factory) as db:
                return work(CartRepo(db, self.clock))

        return run_with_conflict_retry(attempt, **self.retry_policy)

    @staticmethod
    def _find_or_create(repo: CartRepo, user_id: str) -> Cart:
        return repo.find_by_user_id(user_id) or repo.create(user_id)

    def _find_for_user(self, repo: CartRepo, user_id: str) -> Cart:
        cart = repo.find_by_user_id(user_id)
        if cart is None:
            raise CartNotFoundError(f"Cart not found for user: {user_id}")
        self._check_owner(cart, user_id)
        return cart

    @staticmethod
    def _check_owner(cart: Cart, user_id: str) -> None:
        if not cart.belongs_to_user(user_id):
            raise CartOwnershipError(cart.id, user_id)

    @staticmethod
    def _require_text(value: str | None, message: str) -> None:
        if value is None or not value.strip():
            raise CartValidationError(message)

    @staticmethod
    def _require_positive(value, message: str) -> None:
        if value is None or value <= 0:
            raise CartValidationError(message)

    @staticmethod
    def _to_decimal(value) -> Decimal | None:
        if value is None:
            return None
        try:
            price = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation:
            raise CartValidationError(f"Invalid price: {value}") from None
        if not price.is_finite():
            raise CartValidationError(f"Invalid price: {value}")
        return price

    @classmethod
    def _require_quantity(cls, quantity: int) -> None:
        cls._require_positive(quantity, "Quantity must be greater than 0")
        if quantity > MAX_QUANTITY:
            raise CartValidationError(f"Quantity cannot exceed {MAX_QUANTITY}")

    @staticmethod
    def _require_storable_price(price: Decimal) -> None:
        # kolumna zaokrągliłaby np. 0.001 do 0.00
        if price >= PRICE_LIMIT:
            raise CartValidationError(f"Price must be less than {PRICE_LIMIT}")
        if price.quantize(PRICE_STEP) != price:
            raise CartValidationError(
                f"Price cannot have more than {PRICE_DECIMAL_PLACES} decimal places: {price}"
            )
