"""
Client LLM (API compatibile OpenAI) per classificazione e arricchimento.

La capacità IA viene iniettata esplicitamente in classificatore e arricchimento:
se non configurata (nessuna API key) la pipeline usa direttamente i fallback.
Una sola chiamata per richiesta, timeout rigido, nessun retry.
"""
import asyncio
import logging
import time
from typing import Optional

import openai

from core.config import ProcessorConfig, get_config
from ingest.errors import AIUnavailable

logger = logging.getLogger(__name__)


class CompletionClient:
    """Wrapper minimo su openai.AsyncOpenAI: prompt system+user → testo."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout_sec: float = 120.0,
        client: Optional[openai.AsyncOpenAI] = None,
    ):
        if not api_key:
            raise ValueError("LLM_API_KEY non configurato")
        self.model = model
        self.timeout_sec = timeout_sec
        self._client = client or openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_sec,
            max_retries=0,
        )

    async def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.1) -> str:
        """
        Esegue una chat completion e ritorna il contenuto testuale.

        Raises:
            AIUnavailable: timeout, errore di trasporto/API o risposta vuota
        """
        start_time = time.time()
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    temperature=temperature,
                ),
                timeout=self.timeout_sec,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as e:
            logger.error(f"[LLM] Timeout dopo {time.time() - start_time:.1f}s: {e}")
            raise AIUnavailable("LLM timeout") from e
        except openai.OpenAIError as e:
            logger.error(f"[LLM] Errore API: {e}")
            raise AIUnavailable(f"LLM error: {e}") from e

        content = None
        if response.choices:
            content = response.choices[0].message.content
        if not content or not content.strip():
            logger.warning("[LLM] Nessun contenuto nella risposta")
            raise AIUnavailable("Empty LLM response")

        logger.debug(f"[LLM] Risposta {len(content)} caratteri in {time.time() - start_time:.2f}s")
        return content

    async def close(self):
        """Rilascia il pool di connessioni del client openai."""
        await self._client.close()


def build_completion_client(config: ProcessorConfig) -> Optional[CompletionClient]:
    """Crea il client LLM dalla configurazione, None se nessuna API key."""
    if not config.ai_available:
        logger.info("[LLM] API key assente: classificazione e arricchimento useranno i fallback")
        return None
    return CompletionClient(
        api_key=config.llm_api_key.strip(),
        model=config.llm_model,
        base_url=config.llm_base_url,
        timeout_sec=config.llm_timeout_sec,
    )


# Client LLM globale (lazy initialization)
_completion_client: Optional[CompletionClient] = None
_client_initialized = False


def get_completion_client() -> Optional[CompletionClient]:
    """
    Client LLM condiviso (singleton), creato alla prima richiesta.

    Returns:
        CompletionClient, None se nessuna API key configurata
    """
    global _completion_client, _client_initialized
    if not _client_initialized:
        _completion_client = build_completion_client(get_config())
        _client_initialized = True
    return _completion_client


async def close_completion_client():
    """Chiude il client condiviso (pool HTTP) e azzera il singleton."""
    global _completion_client, _client_initialized
    if _completion_client is not None:
        await _completion_client.close()
        logger.info("[LLM] Client chiuso")
    _completion_client = None
    _client_initialized = False
