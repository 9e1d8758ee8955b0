"""
Catalog product table.
"""

from sqlalchemy import Boolean, Column, DECIMAL, Integer, String, Text, text

from app.models.common import CommonModel


class Product(CommonModel):
    __tablename__ = "products"

    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    sku = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    unit_price = Column(DECIMAL(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="BDT", server_default="BDT")
    weight_grams = Column(Integer, nullable=False, default=0, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"), index=True)

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}', unit_price={self.unit_price})>"
