from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Float, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity"),
        CheckConstraint("threshold >= 0", name="ck_inventory_threshold"),
        CheckConstraint("price >= 0", name="ck_inventory_price"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    dosage = Column(String(100), nullable=False)
    formulation = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    threshold = Column(Integer, nullable=False, default=0)
    supplier = Column(String(255), nullable=False)
    expiry_date = Column(DateTime, nullable=False, index=True)
    batch_number = Column(String(100), nullable=False)
    location = Column(String(255), nullable=False)
    price = Column(Float, nullable=True)

    # Stamped on every admin write
    last_updated = Column(DateTime, server_default=func.now())
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    updated_by = relationship("User")

    def __repr__(self):
        return f"<InventoryItem(id={self.id}, name='{self.name}', quantity={self.quantity})>"
