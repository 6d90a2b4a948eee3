"""
Coupon model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, DECIMAL, Boolean
from sqlalchemy.sql import func
from shopmaster.utils.database import Base


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(Text)
    discount_type = Column(String(20), nullable=False)
    discount_value = Column(DECIMAL(10, 2), nullable=False)
    min_order_amount = Column(DECIMAL(10, 2), nullable=True)
    max_discount_amount = Column(DECIMAL(10, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Coupon(id={self.id}, code={self.code}, type={self.discount_type})>"
