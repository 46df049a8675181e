#app/data/models/cart.py
import uuid

from sqlalchemy import Column, Integer, String, Uuid

from app.data.database import Base, UTCDateTime


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # brak unique - przy duplikatach wygrywa najnowszy created_at
    user_id = Column(String(255), nullable=False, index=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)
