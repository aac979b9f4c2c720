"""
Database core module per catalog-processor.

Modelli Category/Product e store del catalogo con create-if-absent atomico:
il vincolo di unicità sul nome decide chi crea, l'altro registra uno skip.
Ogni operazione usa una propria sessione/transazione: il fallimento di un
elemento non annulla quelli già creati.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy import Column, Integer, String, Float, DateTime, Text, Boolean, JSON, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from core.config import get_config

logger = logging.getLogger(__name__)

# Base per i modelli
Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    """Categoria del catalogo (nome univoco, match esatto case-sensitive)"""
    __tablename__ = 'categories'

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    icon = Column(String(10), default='🍫')
    description = Column(String(200))
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class Product(Base):
    """Prodotto del catalogo (categoria referenziata per nome)"""
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    image = Column(String(200), default='🍫')
    category = Column(String(50), nullable=False, index=True)
    rating = Column(Float, default=0)
    num_reviews = Column(Integer, default=0)
    in_stock = Column(Boolean, default=True)
    stock = Column(Integer, default=100)
    weight = Column(String(50), default='100g')
    ingredients = Column(JSON, default=list)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


def normalize_database_url(url: str) -> str:
    """postgresql:// → postgresql+asyncpg:// (driver asincrono)."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


_engine: Optional[AsyncEngine] = None
_session_factory: Optional[Callable[[], AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Engine asincrono (singleton, creato alla prima richiesta)."""
    global _engine
    if _engine is None:
        config = get_config()
        _engine = create_async_engine(normalize_database_url(config.database_url), echo=False)
    return _engine


def get_session_factory() -> Callable[[], AsyncSession]:
    """Session factory asincrona."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False
        )
    return _session_factory


async def create_tables(engine: Optional[AsyncEngine] = None):
    """Crea tabelle categories/products se non esistono."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created successfully")


def category_to_dict(category: Category) -> Dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "icon": category.icon,
        "description": category.description,
        "isActive": category.is_active,
    }


def product_to_dict(product: Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "category": product.category,
        "price": product.price,
    }


class SqlCatalogStore:
    """Store catalogo su SQLAlchemy async."""

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None):
        self._session_factory = session_factory or get_session_factory()

    async def find_category(self, name: str) -> Optional[Dict[str, Any]]:
        async with self._session_factory() as session:
            result = await session.execute(select(Category).where(Category.name == name))
            category = result.scalar_one_or_none()
            return category_to_dict(category) if category else None

    async def create_category_if_absent(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Crea la categoria se il nome non esiste.

        Returns:
            Dict categoria creata, None se esisteva già
        """
        async with self._session_factory() as session:
            result = await session.execute(select(Category.id).where(Category.name == data["name"]))
            if result.scalar_one_or_none() is not None:
                return None

            category = Category(**data)
            session.add(category)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                if await self.find_category(data["name"]) is None:
                    raise
                logger.info(f"[DB] Categoria '{data['name']}' creata da richiesta concorrente")
                return None
            return category_to_dict(category)

    async def find_product(self, name: str) -> Optional[Dict[str, Any]]:
        async with self._session_factory() as session:
            result = await session.execute(select(Product).where(Product.name == name))
            product = result.scalar_one_or_none()
            return product_to_dict(product) if product else None

    async def create_product_if_absent(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Crea il prodotto se il nome non esiste.

        Returns:
            Dict prodotto creato, None se esisteva già
        """
        async with self._session_factory() as session:
            result = await session.execute(select(Product.id).where(Product.name == data["name"]))
            if result.scalar_one_or_none() is not None:
                return None

            product = Product(**data)
            session.add(product)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                if await self.find_product(data["name"]) is None:
                    raise
                logger.info(f"[DB] Prodotto '{data['name']}' creato da richiesta concorrente")
                return None
            return product_to_dict(product)

    async def count_categories(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count(Category.id)))
            return int(result.scalar_one())

    async def count_products(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count(Product.id)))
            return int(result.scalar_one())
