"""
Promotion and discount slab tables.
A promotion exclusively owns its slabs; deleting it deletes them.
"""

from sqlalchemy import Boolean, Column, DECIMAL, ForeignKey, Index, Integer, String, TIMESTAMP, text
from sqlalchemy.orm import relationship

from app.models.common import CommonModel


class Promotion(CommonModel):
    __tablename__ = "promotions"

    name = Column(String(255), nullable=False)
    # structured tag, e.g. "TYPE:PERCENTAGE,PERCENTAGE:10"; optional for legacy rows
    type_tag = Column(String(255), nullable=True)
    priority = Column(Integer, nullable=False, default=0, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    starts_at = Column(TIMESTAMP(timezone=True), nullable=True)
    ends_at = Column(TIMESTAMP(timezone=True), nullable=True)

    slabs = relationship(
        "PromotionSlab",
        back_populates="promotion",
        cascade="all, delete-orphan",
        order_by="PromotionSlab.range_start",
        lazy="selectin",
    )

    __table_args__ = (
        Index('idx_promotions_active_window', 'is_active', 'starts_at', 'ends_at'),
    )

    def __repr__(self):
        return f"<Promotion(id={self.id}, name='{self.name}', is_active={self.is_active})>"


class PromotionSlab(CommonModel):
    __tablename__ = "promotion_slabs"

    promotion_id = Column(String(36), ForeignKey("promotions.id", ondelete="CASCADE"), nullable=False, index=True)
    range_start = Column(DECIMAL(12, 2), nullable=False, default=0, server_default="0")
    range_end = Column(DECIMAL(12, 2), nullable=True)  # NULL = unbounded
    rule_kind = Column(String(32), nullable=False)
    rule_value = Column(DECIMAL(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    promotion = relationship("Promotion", back_populates="slabs")

    def __repr__(self):
        return f"<PromotionSlab(id={self.id}, range=[{self.range_start}, {self.range_end}], rule_value={self.rule_value})>"
