# app/domain/errors.py
"""
Błędy domeny koszyka.
Każdy rodzaj ma własną klasę, żeby warstwa HTTP mogła je rozróżnić.
"""


class CartError(Exception):
    """Bazowy błąd logiki koszyka."""

    def __init__(self, message: str = "Cart operation failed"):
        self.message = message
        super().__init__(self.message)


class CartValidationError(CartError):
    """Niepoprawne dane wejściowe (ilość, cena, puste id/nazwa)."""


class CartNotFoundError(CartError):
    """Koszyk albo pozycja koszyka nie istnieje."""


class CartOwnershipError(CartError):
    """Koszyk nie należy do użytkownika."""

    def __init__(self, cart_id=None, user_id: str | None = None):
        super().__init__(f"Cart {cart_id} does not belong to user {user_id}")


class OptimisticConflictError(CartError):
    """Równoległy zapis wygrał wyścig, jednostka pracy do powtórzenia."""


class CartStateError(CartError):
    """Zapis koszyka, którego nie ma w bazie."""
