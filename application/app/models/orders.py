"""
SQLAlchemy ORM Models for orders.
An order is a point-in-time receipt: line items snapshot product and discount data.
"""

from sqlalchemy import Column, DECIMAL, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from app.models.common import CommonModel


class Order(CommonModel):
    __tablename__ = "orders"

    customer_id = Column(String(64), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(20), nullable=True)
    customer_address = Column(String(500), nullable=True)
    promotion_id = Column(String(36), nullable=True)
    status = Column(String(16), nullable=False, default="PENDING", index=True)
    currency = Column(String(3), nullable=False, default="BDT")
    subtotal = Column(DECIMAL(12, 2), nullable=False)
    discount = Column(DECIMAL(12, 2), nullable=False, default=0)
    total = Column(DECIMAL(12, 2), nullable=False)
    notes = Column(Text, nullable=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index('idx_orders_customer_status', 'customer_id', 'status'),
    )

    def __repr__(self):
        return f"<Order(id={self.id}, customer_id='{self.customer_id}', status={self.status}, total={self.total})>"


class OrderItem(CommonModel):
    __tablename__ = "order_items"

    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    product_sku = Column(String(100), nullable=False)
    unit_price = Column(DECIMAL(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    discount = Column(DECIMAL(12, 2), nullable=False, default=0)
    total = Column(DECIMAL(12, 2), nullable=False)
    applied_promotions = Column(JSON, nullable=False, default=list)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem(id={self.id}, order_id={self.order_id}, sku='{self.product_sku}', quantity={self.quantity})>"
