"""
Test per SqlCatalogStore su SQLite (aiosqlite).
"""
import asyncio

import pytest

from core.database import normalize_database_url


def _product(name: str, category: str = "Coffee") -> dict:
    return {
        "name": name,
        "description": f"{name} - High quality product.",
        "price": 9.99,
        "category": category,
        "weight": "100g",
        "ingredients": ["beans"],
        "stock": 100,
        "in_stock": True,
        "is_active": True,
    }


class TestDatabaseUrl:
    """Test normalizzazione URL."""

    def test_postgres_uses_asyncpg(self):
        assert normalize_database_url("postgresql://u:p@db/catalog") == "postgresql+asyncpg://u:p@db/catalog"

    def test_other_urls_unchanged(self):
        assert normalize_database_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


class TestSqlCatalogStore:
    """Test create-if-absent su database reale."""

    @pytest.mark.asyncio
    async def test_category_create_if_absent(self, sql_store):
        data = {"name": "Coffee", "icon": "☕", "description": "Category for coffee", "is_active": True}

        created = await sql_store.create_category_if_absent(data)
        again = await sql_store.create_category_if_absent(data)

        assert created["name"] == "Coffee"
        assert created["isActive"] is True
        assert again is None
        assert await sql_store.count_categories() == 1

    @pytest.mark.asyncio
    async def test_category_lookup_case_sensitive(self, sql_store):
        await sql_store.create_category_if_absent({"name": "Coffee", "icon": "☕", "description": ""})

        assert await sql_store.find_category("Coffee") is not None
        assert await sql_store.find_category("coffee") is None

    @pytest.mark.asyncio
    async def test_product_create_if_absent(self, sql_store):
        created = await sql_store.create_product_if_absent(_product("Davidoff Coffee"))
        again = await sql_store.create_product_if_absent(_product("Davidoff Coffee", category="Other"))

        assert set(created) == {"id", "name", "category", "price"}
        assert created["price"] == 9.99
        assert again is None
        assert (await sql_store.find_product("Davidoff Coffee"))["category"] == "Coffee"
        assert await sql_store.count_products() == 1

    @pytest.mark.asyncio
    async def test_concurrent_creates_converge(self, sql_store):
        """Test: due create concorrenti sullo stesso nome → una creazione, un None."""
        results = await asyncio.gather(
            sql_store.create_product_if_absent(_product("Lotus Spread", "Chocolate Spreads")),
            sql_store.create_product_if_absent(_product("Lotus Spread", "Chocolate Spreads")),
        )

        assert sum(1 for r in results if r is not None) == 1
        assert await sql_store.count_products() == 1
