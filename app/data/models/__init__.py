#import wszystkich modeli, żeby SQLAlchemy je zarejestrował w base metadata

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel

__all__ = ["CartModel", "CartItemModel"]
