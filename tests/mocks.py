"""
Mock utilities per test pipeline catalogo.
Mock per client LLM, store catalogo e decoder PDF.
"""
import asyncio
import json
from typing import Any, Dict, List, Optional, Sequence

from ingest.errors import AIUnavailable


# ============================================================================
# LLM Mocks
# ============================================================================

class FakeCompletionClient:
    """
    Client LLM finto con la stessa interfaccia di CompletionClient.complete.

    Modes:
    - "success": ritorna le risposte impostate (in ordine, l'ultima si ripete)
    - "malformed": testo non JSON
    - "timeout": AIUnavailable("LLM timeout")
    - "error": AIUnavailable da errore API
    - "connection": ConnectionError non convertito (client personalizzato)
    """

    def __init__(self, responses: Optional[Sequence[Any]] = None, mode: str = "success"):
        self.mode = mode
        self._responses: List[str] = [
            r if isinstance(r, str) else json.dumps(r) for r in (responses or [])
        ]
        self.calls: List[Dict[str, str]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.1) -> str:
        self.calls.append({"system": system_prompt, "user": user_prompt})
        await asyncio.sleep(0)

        if self.mode == "timeout":
            raise AIUnavailable("LLM timeout")
        if self.mode == "error":
            raise AIUnavailable("LLM error: service unavailable")
        if self.mode == "connection":
            raise ConnectionError("connection reset by peer")
        if self.mode == "malformed":
            return "Sorry, I cannot help with that {"

        if not self._responses:
            return "[]"
        idx = min(len(self.calls) - 1, len(self._responses) - 1)
        return self._responses[idx]


class RoutingCompletionClient(FakeCompletionClient):
    """Risponde in base al prompt: classificazione → lista categorie, arricchimento → oggetto."""

    def __init__(self, categories: Sequence[str], details: Dict[str, Any], enrich_error: Optional[Exception] = None):
        super().__init__()
        self.categories = list(categories)
        self.details = dict(details)
        self.enrich_error = enrich_error

    async def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.1) -> str:
        self.calls.append({"system": system_prompt, "user": user_prompt})
        await asyncio.sleep(0)
        if "category names" in user_prompt:
            return json.dumps(self.categories)
        if self.enrich_error is not None:
            raise self.enrich_error
        return f"Here is the data:\n```json\n{json.dumps(self.details)}\n```"


# ============================================================================
# Store Mocks
# ============================================================================

class FakeCatalogStore:
    """Store catalogo in memoria con create-if-absent e fallimenti forzati per nome."""

    def __init__(self, fail_on: Optional[Sequence[str]] = None):
        self.categories: Dict[str, Dict[str, Any]] = {}
        self.products: Dict[str, Dict[str, Any]] = {}
        self.fail_on = set(fail_on or [])
        self._next_id = 1

    def _new_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    async def find_category(self, name: str) -> Optional[Dict[str, Any]]:
        await asyncio.sleep(0)
        return self.categories.get(name)

    async def create_category_if_absent(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        await asyncio.sleep(0)
        if data["name"] in self.fail_on:
            raise RuntimeError(f"Storage error for {data['name']}")
        if data["name"] in self.categories:
            return None
        record = {"id": self._new_id(), **data}
        self.categories[data["name"]] = record
        return record

    async def find_product(self, name: str) -> Optional[Dict[str, Any]]:
        await asyncio.sleep(0)
        return self.products.get(name)

    async def create_product_if_absent(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        await asyncio.sleep(0)
        if data["name"] in self.fail_on:
            raise RuntimeError(f"Storage error for {data['name']}")
        if data["name"] in self.products:
            return None
        record = {"id": self._new_id(), **data}
        self.products[data["name"]] = record
        return {
            "id": record["id"],
            "name": record["name"],
            "category": record["category"],
            "price": record["price"],
        }

    async def count_categories(self) -> int:
        return len(self.categories)

    async def count_products(self) -> int:
        return len(self.products)


# ============================================================================
# Decoder Mocks
# ============================================================================

def make_decoder(text: str):
    """Decoder PDF finto che ritorna sempre lo stesso testo."""
    def _decode(content: bytes) -> str:
        return text
    return _decode


def failing_decoder(content: bytes) -> str:
    raise ValueError("Invalid PDF structure")
