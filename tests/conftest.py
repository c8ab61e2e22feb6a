"""Shared test fixtures for the wine commerce test suite."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.cache import get_catalog_cache
from src.core.models import Principal, Role
from src.db.engine import build_engine
from src.db.models import Base, Product, Variety, Winery, WineType


# ── Async engine for tests (in-memory SQLite) ──────────────────


@pytest.fixture
async def async_engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session_factory(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def clear_catalog_cache():
    """Each test gets its own database, so cached catalog reads must not leak."""
    get_catalog_cache().invalidate()
    yield
    get_catalog_cache().invalidate()


# ── Callers ─────────────────────────────────────────────────────


@pytest.fixture
def customer() -> Principal:
    return Principal(customer_id="customer-1", roles=frozenset({Role.USER}))


@pytest.fixture
def other_customer() -> Principal:
    return Principal(customer_id="customer-2", roles=frozenset({Role.USER}))


@pytest.fixture
def admin() -> Principal:
    return Principal(customer_id="admin-1", roles=frozenset({Role.ADMIN}))


# ── Sample catalog ──────────────────────────────────────────────


@dataclass
class SampleCatalog:
    winery: Winery
    variety: Variety
    wine_type: WineType
    sparkling: WineType
    malbec: Product
    cabernet: Product
    brut: Product


@pytest.fixture
async def catalog(db_session) -> SampleCatalog:
    """Two still reds and a sparkling wine from one winery."""
    winery = Winery(name="Catena Zapata")
    variety = Variety(name="Malbec")
    red = WineType(name="Red")
    sparkling = WineType(name="Sparkling")
    db_session.add_all([winery, variety, red, sparkling])
    await db_session.flush()

    malbec = Product(
        name="Malbec Reserva",
        description="Deep and fruity",
        image="malbec.png",
        year=2019,
        price=20.0,
        stock=10,
        id_winery=winery.id,
        id_variety=variety.id,
        id_type=red.id,
    )
    cabernet = Product(
        name="Cabernet Franc",
        description="Herbal and bright",
        image="cabernet.png",
        year=2020,
        price=35.5,
        stock=5,
        id_winery=winery.id,
        id_variety=variety.id,
        id_type=red.id,
    )
    brut = Product(
        name="Brut Nature",
        description="Dry sparkling",
        image="brut.png",
        year=2021,
        price=15.0,
        stock=3,
        id_winery=winery.id,
        id_variety=variety.id,
        id_type=sparkling.id,
    )
    db_session.add_all([malbec, cabernet, brut])
    await db_session.commit()
    for product in (malbec, cabernet, brut):
        await db_session.refresh(product)

    return SampleCatalog(
        winery=winery,
        variety=variety,
        wine_type=red,
        sparkling=sparkling,
        malbec=malbec,
        cabernet=cabernet,
        brut=brut,
    )
