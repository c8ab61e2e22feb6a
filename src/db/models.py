"""SQLAlchemy ORM models for the wine catalog, orders and carts."""

from __future__ import annotations

import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


# ── Taxonomy ────────────────────────────────────────────────────


class Winery(Base):
    __tablename__ = "winery"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class Variety(Base):
    __tablename__ = "variety"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class WineType(Base):
    __tablename__ = "type"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


# ── Catalog ─────────────────────────────────────────────────────


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    id_winery: Mapped[int] = mapped_column(ForeignKey("winery.id"), nullable=False)
    id_variety: Mapped[int] = mapped_column(ForeignKey("variety.id"), nullable=False)
    id_type: Mapped[int] = mapped_column(ForeignKey("type.id"), nullable=False)

    # Eager so that listing products never triggers a lazy load on an AsyncSession
    winery: Mapped[Winery] = relationship(lazy="selectin")
    variety: Mapped[Variety] = relationship(lazy="selectin")
    type: Mapped[WineType] = relationship(lazy="selectin")


# ── Orders ──────────────────────────────────────────────────────


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id_customer: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    total_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    shipping_address: Mapped[str | None] = mapped_column(String(512), nullable=True)
    order_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )


class OrderDetail(Base):
    __tablename__ = "order_details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id_order: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    id_product: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False)

    # Unit price at the time the line was written
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    @property
    def amount(self) -> float:
        return self.price * self.quantity


class CartItem(Base):
    __tablename__ = "cart"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id_customer: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    id_product: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
