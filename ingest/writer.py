"""
Catalog writer (Stage 5) - Scrittura idempotente di categorie e prodotti.

- Categorie: lookup per nome esatto, creazione solo se assente; tutte prima dei prodotti.
- Prodotti: create-if-absent atomico con esito a tre stati (created/skipped/failed).
  Un errore su un prodotto viene registrato e il batch continua, senza rollback
  degli elementi già creati.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Protocol, Sequence

from ingest.types import CategoryBatchResult, CategorySuggestion, ProductDraft, WriteResult
from ingest.validation import category_to_model, draft_to_model, model_to_dict

logger = logging.getLogger(__name__)

ALREADY_EXISTS_REASON = "Already exists"


class CatalogStore(Protocol):
    async def find_category(self, name: str) -> Optional[Dict[str, Any]]: ...

    async def create_category_if_absent(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...

    async def find_product(self, name: str) -> Optional[Dict[str, Any]]: ...

    async def create_product_if_absent(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...

    async def count_categories(self) -> int: ...

    async def count_products(self) -> int: ...


class CatalogWriter:
    """
    Persistenza idempotente sopra un CatalogStore.

    Il lock per nome serializza check-then-create dentro un run; tra run concorrenti
    decide il create-if-absent atomico dello store.
    """

    def __init__(self, store: CatalogStore):
        self.store = store
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, kind: str, name: str) -> asyncio.Lock:
        key = f"{kind}:{name}"
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def create_categories(self, suggestions: Sequence[CategorySuggestion]) -> CategoryBatchResult:
        """
        Crea le categorie assenti.

        Returns:
            CategoryBatchResult con le categorie create e i nomi disponibili
            nel catalogo (esistenti o appena creati), nell'ordine ricevuto
        """
        batch = CategoryBatchResult()

        for suggestion in suggestions:
            name = suggestion.name
            try:
                async with self._lock_for("category", name):
                    if await self.store.find_category(name) is not None:
                        logger.debug(f"[WRITER] Categoria '{name}' già presente")
                        batch.available.append(name)
                        continue

                    model = category_to_model(suggestion)
                    created = await self.store.create_category_if_absent(model_to_dict(model))
            except Exception as e:
                logger.error(f"[WRITER] Errore creazione categoria {name}: {e}")
                continue

            if created is not None:
                batch.created.append(suggestion)
                logger.info(f"[WRITER] Categoria creata: {name}")
            batch.available.append(name)

        logger.info(
            f"[WRITER] Categorie: {len(batch.created)} create, "
            f"{len(batch.available)} disponibili su {len(suggestions)} richieste"
        )
        return batch

    async def create_product(self, draft: ProductDraft) -> WriteResult:
        """
        Crea un prodotto se il nome non esiste; non solleva mai per errori del singolo elemento.
        """
        name = draft.name.strip()
        try:
            async with self._lock_for("product", name):
                if await self.store.find_product(name) is not None:
                    logger.info(f"[WRITER] Prodotto '{name}' già presente, skip")
                    return WriteResult(status="skipped", name=name, reason=ALREADY_EXISTS_REASON)

                model = draft_to_model(draft)
                record = await self.store.create_product_if_absent(model_to_dict(model))
        except Exception as e:
            error_msg = str(e) or type(e).__name__
            logger.error(f"[WRITER] Errore creazione prodotto {name}: {error_msg}")
            return WriteResult(status="failed", name=name, error=error_msg)

        if record is None:
            return WriteResult(status="skipped", name=name, reason=ALREADY_EXISTS_REASON)

        logger.debug(f"[WRITER] Prodotto creato: {name} ({draft.category})")
        return WriteResult(status="created", name=name, record=record)
