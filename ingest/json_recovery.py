"""
Recupero JSON da risposte LLM rumorose.

Ogni strategia è una funzione pura `try_*(text) -> (value, ok)`;
le "scale" (ladder) le provano in ordine, dalla più rigorosa alla più permissiva,
e la prima con ok=True vince.
"""
import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

ParseResult = Tuple[Any, bool]
Strategy = Callable[[str], ParseResult]

MAX_QUOTED_NAME_LENGTH = 100

_THINK_RE = re.compile(r'<think>[\s\S]*?</think>', re.IGNORECASE)
_FENCE_JSON_RE = re.compile(r'```json\n?', re.IGNORECASE)
_FENCE_RE = re.compile(r'```\n?')
_NESTED_ARRAY_RE = re.compile(r'\[([^\]]*(?:\[[^\]]*\][^\]]*)*)\]')
_QUOTED_RE = re.compile(r'"([^"]+)"')
_FIRST_ARRAY_LAZY_RE = re.compile(r'\[(.*?)\]', re.DOTALL)
_OBJECT_LAZY_RE = re.compile(r'\{[\s\S]*?\}')
_OBJECT_GREEDY_RE = re.compile(r'\{[\s\S]*\}')
_EDGE_QUOTES_RE = re.compile(r'^["\']|["\']$')
_NAME_PUNCT_RE = re.compile(r'[^\w\s&-]')

_FAIL: ParseResult = (None, False)


def clean_response(text: Optional[str]) -> str:
    """Rimuove blocchi di ragionamento <think> e code fence markdown."""
    if not text:
        return ""
    cleaned = _THINK_RE.sub('', text)
    cleaned = _FENCE_JSON_RE.sub('', cleaned)
    cleaned = _FENCE_RE.sub('', cleaned)
    return cleaned.strip()


def balanced_span(text: str, open_char: str, close_char: str) -> Optional[str]:
    """
    Prima sottostringa bilanciata open_char...close_char (ignora caratteri dentro stringhe JSON).
    """
    start = text.find(open_char)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        ch = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return text[start:idx + 1]
    return None


def _loads(fragment: str) -> Any:
    try:
        return json.loads(fragment)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None


def _clean_names(values: Sequence[Any]) -> List[str]:
    names = []
    for value in values:
        if value is None:
            continue
        name = value.strip() if isinstance(value, str) else str(value).strip()
        if name:
            names.append(name)
    return names


def _as_names(value: Any) -> ParseResult:
    if isinstance(value, list) and value:
        names = _clean_names(value)
        if names:
            return names, True
    return _FAIL


# ---------------------------------------------------------------------------
# Strategie array (nomi categoria)
# ---------------------------------------------------------------------------

def try_first_balanced_array(text: str) -> ParseResult:
    span = balanced_span(text, '[', ']')
    if span is None:
        return _FAIL
    return _as_names(_loads(span))


def try_whole_array(text: str) -> ParseResult:
    return _as_names(_loads(text.strip()))


def try_each_array(text: str) -> ParseResult:
    for match in _NESTED_ARRAY_RE.finditer(text):
        names, ok = _as_names(_loads(match.group(0)))
        if ok:
            return names, True
    return _FAIL


def try_quoted_strings(text: str) -> ParseResult:
    names = [m.strip() for m in _QUOTED_RE.findall(text)]
    names = [n for n in names if 0 < len(n) < MAX_QUOTED_NAME_LENGTH]
    return (names, True) if names else _FAIL


def try_comma_split(text: str) -> ParseResult:
    match = _FIRST_ARRAY_LAZY_RE.search(text)
    if not match:
        return _FAIL
    names = []
    for part in match.group(1).split(','):
        name = _EDGE_QUOTES_RE.sub('', part.strip())
        name = _NAME_PUNCT_RE.sub('', name).strip()
        if 0 < len(name) < MAX_QUOTED_NAME_LENGTH:
            names.append(name)
    return (names, True) if names else _FAIL


ARRAY_STRATEGIES: List[Strategy] = [
    try_first_balanced_array,
    try_whole_array,
    try_each_array,
    try_quoted_strings,
    try_comma_split,
]


# ---------------------------------------------------------------------------
# Strategie oggetto (dettagli prodotto)
# ---------------------------------------------------------------------------

def _as_object(value: Any) -> ParseResult:
    if isinstance(value, dict):
        return value, True
    return _FAIL


def try_first_object(text: str) -> ParseResult:
    match = _OBJECT_LAZY_RE.search(text)
    if not match:
        return _FAIL
    return _as_object(_loads(match.group(0)))


def try_whole_object(text: str) -> ParseResult:
    return _as_object(_loads(text.strip()))


def try_each_object(text: str) -> ParseResult:
    for match in _OBJECT_LAZY_RE.finditer(text):
        data, ok = _as_object(_loads(match.group(0)))
        if ok:
            return data, True
    return _FAIL


def try_balanced_object(text: str) -> ParseResult:
    match = _OBJECT_GREEDY_RE.search(text)
    if not match:
        return _FAIL
    span = balanced_span(match.group(0), '{', '}')
    if span is None:
        return _FAIL
    return _as_object(_loads(span))


OBJECT_STRATEGIES: List[Strategy] = [
    try_first_object,
    try_whole_object,
    try_each_object,
    try_balanced_object,
]


def run_ladder(text: Optional[str], strategies: Sequence[Strategy]) -> ParseResult:
    """
    Prova le strategie in ordine sulla risposta ripulita.

    Returns:
        (valore, True) dalla prima strategia riuscita, altrimenti (None, False)
    """
    cleaned = clean_response(text)
    if not cleaned:
        return _FAIL

    for strategy in strategies:
        value, ok = strategy(cleaned)
        if ok:
            logger.debug(f"[JSON_RECOVERY] Risposta recuperata con {strategy.__name__}")
            return value, True

    logger.debug(f"[JSON_RECOVERY] Nessuna strategia riuscita: {cleaned[:200]!r}")
    return _FAIL


def recover_name_list(text: Optional[str]) -> List[str]:
    """Lista nomi dalla risposta LLM ([] se irrecuperabile)."""
    value, ok = run_ladder(text, ARRAY_STRATEGIES)
    return value if ok else []


def recover_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Primo oggetto JSON dalla risposta LLM (None se irrecuperabile)."""
    value, ok = run_ladder(text, OBJECT_STRATEGIES)
    return value if ok else None
