"""
Database Models - consignors, items and the orders that group them
Money columns are stored in cents
"""
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, Text, Boolean, ForeignKey, JSON, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .connection import Base


class User(Base):
    """
    Login account - admins and consignors
    Consignor accounts are linked to a customer row
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(200))
    role = Column(String(20), nullable=False, default="consignor", index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer = relationship("Customer", back_populates="users")


class Customer(Base):
    """
    Consignor - the person who submits items for resale
    """
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50))
    address = Column(String(500))
    city = Column(String(100))
    state = Column(String(100))
    postal_code = Column(String(20))
    country = Column(String(2), default="NL")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    users = relationship("User", back_populates="customer")
    items = relationship("Item", back_populates="customer")
    orders = relationship("Order", back_populates="customer")


class Order(Base):
    """
    Order - items submitted together, used for shipping and tracking
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), unique=True, index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    status = Column(String(30), nullable=False, default="awaiting_shipment", index=True)
    tracking_code = Column(String(100), index=True)
    submission_date = Column(DateTime(timezone=True), server_default=func.now())

    # Estimated totals at intake (cents)
    total_value = Column(Integer, default=0)
    total_payout = Column(Integer, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer = relationship("Customer", back_populates="orders")
    items = relationship("Item", back_populates="order")
    shipping = relationship("Shipping", back_populates="order", uselist=False)


class Item(Base):
    """
    Consignment item - tracked through the status lifecycle
    """
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    reference_id = Column(String(50), unique=True, index=True, nullable=False)  # CS-YYMMDD-XXXXX-XXX
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text)
    image_url = Column(String(1000))
    category = Column(String(100))
    brand = Column(String(100))
    condition = Column(String(50))

    status = Column(String(20), nullable=False, default="pending", index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="items")
    order = relationship("Order", back_populates="items")
    analysis = relationship("Analysis", back_populates="item", uselist=False, cascade="all, delete-orphan")
    pricing = relationship("Pricing", back_populates="item", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_item_customer_status', 'customer_id', 'status'),
    )


class Analysis(Base):
    """
    Admin review of an item (what it is and what state it is in)
    """
    __tablename__ = "analyses"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), unique=True, nullable=False)
    product_type = Column(String(100))
    brand = Column(String(100))
    model = Column(String(100))
    condition = Column(String(50))
    accessories = Column(JSON, default=list)
    additional_notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    item = relationship("Item", back_populates="analysis")


class Pricing(Base):
    """
    Pricing and payout for an item (cents)
    final_* columns are filled when the item sells
    """
    __tablename__ = "pricing"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), unique=True, nullable=False)

    average_market_price = Column(Integer)
    suggested_listing_price = Column(Integer)
    suggested_payout = Column(Integer)
    commission_rate = Column(Float)  # percent, 1 decimal
    payout_type = Column(String(20), default="cash", nullable=False)

    final_sale_price = Column(Integer)
    final_commission = Column(Integer)
    final_payout = Column(Integer)
    sold_at = Column(DateTime(timezone=True))
    paid_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    item = relationship("Item", back_populates="pricing")


class Shipping(Base):
    """
    Shipping label for an order
    """
    __tablename__ = "shipping"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), unique=True, nullable=False)
    label_url = Column(String(1000))
    tracking_number = Column(String(100))
    carrier = Column(String(50))

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="shipping")


class CommissionSettings(Base):
    """
    Admin-editable commission rules (single row, id=1)
    Rates are percentages at the €50/€100/€200/€500 anchors
    """
    __tablename__ = "commission_settings"

    id = Column(Integer, primary_key=True)
    tier1_rate = Column(Float, nullable=False, default=50.0)
    tier2_rate = Column(Float, nullable=False, default=40.0)
    tier3_rate = Column(Float, nullable=False, default=30.0)
    tier4_rate = Column(Float, nullable=False, default=20.0)
    store_credit_bonus = Column(Float, nullable=False, default=10.0)
    minimum_value = Column(Integer, nullable=False, default=5000)  # cents

    store_credit_enabled = Column(Boolean, nullable=False, default=True)
    direct_buyout_enabled = Column(Boolean, nullable=False, default=False)
    recycling_enabled = Column(Boolean, nullable=False, default=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
