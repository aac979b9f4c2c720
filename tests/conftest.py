"""
Configurazione pytest e fixture comuni.
"""
import os

import pytest
import pytest_asyncio

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from core.config import ProcessorConfig  # noqa: E402

PDF_BYTES = b"%PDF-1.4 fake listino"

SAMPLE_LISTINO = """SUPER TRADERS
Sr. No | Item List
1 | Dalfi Dark Chocolate
2 | Nutella Spread 200g
3 | Davidoff Coffee Rich Aroma
4 | Cocon Jelly Lychee
5 | Bavaria Malt Drink
Page 1
"""


@pytest.fixture
def config():
    """Configurazione di test: nessuna chiave LLM, OCR disabilitato, esecuzione sequenziale."""
    return ProcessorConfig(
        database_url="sqlite+aiosqlite:///:memory:",
        llm_api_key=None,
        ocr_enabled=False,
        enrich_concurrency=1,
    )


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES


@pytest.fixture
def sample_listino():
    return SAMPLE_LISTINO


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    """SqlCatalogStore su SQLite (aiosqlite) con tabelle fresche."""
    from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
    from sqlalchemy.orm import sessionmaker

    from core.database import SqlCatalogStore, create_tables

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await create_tables(engine)
    session_factory = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    yield SqlCatalogStore(session_factory=session_factory)
    await engine.dispose()
