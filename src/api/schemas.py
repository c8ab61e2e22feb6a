"""Request/response schemas for the API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ── Taxonomy (type / variety / winery) ──────────────────────────


class TaxonomyCreateRequest(BaseModel):
    name: Optional[str] = Field(default=None, examples=["Malbec"])


class TaxonomyUpdateRequest(BaseModel):
    id: int
    name: Optional[str] = None


class TaxonomyResponse(_ORMModel):
    id: int
    name: str


# ── Products ────────────────────────────────────────────────────


class ProductWriteRequest(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    year: Optional[int] = None
    price: Optional[float] = None
    stock: Optional[int] = None
    id_winery: Optional[int] = None
    id_variety: Optional[int] = None
    id_type: Optional[int] = None


class ProductResponse(_ORMModel):
    id: int
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    year: Optional[int] = None
    price: float
    stock: int
    id_winery: int
    id_variety: int
    id_type: int


class ProductView(BaseModel):
    """A product with its taxonomy resolved to names, as shown in the shop."""

    id: int
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    year: Optional[int] = None
    price: float
    stock: int
    winery: str
    variety: str
    type: str


# ── Orders ──────────────────────────────────────────────────────


class OrderLineRequest(BaseModel):
    id_product: int
    quantity: Optional[int] = None


class OrderCreateRequest(BaseModel):
    shipping_address: Optional[str] = None
    order_email: Optional[str] = None
    order_details: list[OrderLineRequest] = Field(default_factory=list)


class OrderUpdateRequest(BaseModel):
    id: int
    shipping_address: Optional[str] = None
    order_email: Optional[str] = None


class AdminOrderWriteRequest(BaseModel):
    id: Optional[int] = None
    id_customer: Optional[str] = None
    total_price: Optional[float] = None
    shipping_address: Optional[str] = None
    order_email: Optional[str] = None


class OrderResponse(_ORMModel):
    id: int
    id_customer: str
    total_price: float
    shipping_address: Optional[str] = None
    order_email: Optional[str] = None


# ── Order details ───────────────────────────────────────────────


class OrderDetailAddRequest(BaseModel):
    id_order: int
    id_product: int
    quantity: Optional[int] = None


class OrderDetailUpdateRequest(BaseModel):
    id: int
    id_order: int
    quantity: Optional[int] = None


class AdminOrderDetailWriteRequest(BaseModel):
    id: Optional[int] = None
    id_order: Optional[int] = None
    id_product: Optional[int] = None
    price: Optional[float] = None
    quantity: Optional[int] = None


class OrderDetailResponse(_ORMModel):
    id: int
    id_order: int
    id_product: int
    price: float
    quantity: int


# ── Carts ───────────────────────────────────────────────────────


class CartCreateRequest(BaseModel):
    id_product: Optional[int] = None
    quantity: Optional[int] = None


class CartUpdateRequest(BaseModel):
    id: Optional[int] = None
    quantity: Optional[int] = None


class AdminCartWriteRequest(BaseModel):
    id: Optional[int] = None
    id_customer: Optional[str] = None
    id_product: Optional[int] = None
    price: Optional[float] = None
    quantity: Optional[int] = None


class CartResponse(_ORMModel):
    id: int
    id_customer: str
    id_product: int
    price: float
    quantity: int


# ── Reports ─────────────────────────────────────────────────────


class LowStockItem(BaseModel):
    product_id: int
    product_name: str
    stock: int


class TopProductItem(BaseModel):
    product_id: int
    product_name: str
    order_details_count: int
    units_sold: int


class TypeSummary(BaseModel):
    type_id: int
    type_name: str
    order_details_count: int
    units_sold: int


class ProductQuantityItem(BaseModel):
    product_id: int
    product_name: str
    units_sold: int


class TypeQuantityItem(BaseModel):
    type_id: int
    type_name: str
    units_sold: int


class ProductSalesItem(BaseModel):
    product_id: int
    product_name: str
    total_sales: float


class ProductStockItem(BaseModel):
    product_id: int
    product_name: str
    year: Optional[int] = None
    stock: int


# ── Users ───────────────────────────────────────────────────────


class UserProfileUpdateRequest(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    dni: Optional[str] = None
    cellphone: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    photo: Optional[str] = None


# ── Misc ────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "wine-commerce"


class ErrorResponse(BaseModel):
    detail: str
