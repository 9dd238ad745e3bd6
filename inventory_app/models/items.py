import uuid

from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint

from inventory_app.database.database import Base
from inventory_app.utils.clock import utcnow


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("total_quantity > 0", name="items_total_quantity_positive"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    total_quantity = Column(Integer, nullable=False)  # fixed at creation, never updated
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Item(id={self.id}, name={self.name}, total={self.total_quantity})>"
