from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    false,
    func,
    true,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class RestaurantModel(Base):
    __tablename__ = "restaurants"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    cuisine: Mapped[str] = mapped_column(String(50), nullable=False)
    image_url: Mapped[str] = mapped_column(String(500), nullable=False)
    street: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(50), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(10), nullable=False)
    zone: Mapped[str] = mapped_column(String(50), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    delivery_fee_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    minimum_order_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    operating_hours: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    rating_total: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    delivery_zones: Mapped[list["RestaurantDeliveryZoneModel"]] = relationship(
        back_populates="restaurant",
        cascade="all, delete-orphan",
        order_by="RestaurantDeliveryZoneModel.position",
    )
    menu_items: Mapped[list["MenuItemModel"]] = relationship(
        back_populates="restaurant",
        cascade="all, delete-orphan",
        order_by="MenuItemModel.position",
    )

    __table_args__ = (
        Index("ix_restaurants_status_featured", "status", "featured"),
        Index("ix_restaurants_cuisine", "cuisine"),
    )


class RestaurantDeliveryZoneModel(Base):
    __tablename__ = "restaurant_delivery_zones"

    restaurant_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        primary_key=True,
    )
    zone: Mapped[str] = mapped_column(String(50), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    restaurant: Mapped[RestaurantModel] = relationship(back_populates="delivery_zones")

    __table_args__ = (Index("ix_restaurant_delivery_zones_zone", "zone"),)


class MenuItemModel(Base):
    __tablename__ = "menu_items"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true())
    is_spicy: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    is_vegetarian: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    is_vegan: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    allergens: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    restaurant: Mapped[RestaurantModel] = relationship(back_populates="menu_items")
