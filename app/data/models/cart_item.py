import uuid

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Uuid

from app.data.database import Base, UTCDateTime
from app.domain.cart import PRICE_DECIMAL_PLACES, PRICE_MAX_DIGITS


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    cart_id = Column(Uuid(as_uuid=True), ForeignKey("carts.id"), nullable=False, index=True)
    product_id = Column(String(255), nullable=False)
    product_name = Column(String(255), nullable=False)

    price = Column(Numeric(PRICE_MAX_DIGITS, PRICE_DECIMAL_PLACES), nullable=False)
    quantity = Column(Integer, nullable=False)

    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)
