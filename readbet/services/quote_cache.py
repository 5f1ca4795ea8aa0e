"""
Memoized quotes owned by a ledger instance.

Quotes depend on a book's effective range, which changes when the reader
edits their preferences.  The difficulty tag is part of each key, so a
retagged book is simply quoted afresh; preference edits are not, and callers
must call :meth:`QuoteCache.invalidate` for that book when that happens;
nothing here expires on its own.
"""

import logging
from typing import Callable, Dict, Tuple

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str, str]  # (kind, book_id, detail)


class QuoteCache:

    def __init__(self):
        self._quotes: Dict[CacheKey, str] = {}
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, kind: str, book_id: str, detail: str, compute: Callable[[], str]) -> str:
        key = (kind, book_id, detail)
        cached = self._quotes.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        value = compute()
        self._quotes[key] = value
        return value

    def invalidate(self, book_id: str) -> int:
        """Drop every cached quote for ``book_id``; returns how many."""
        stale = [key for key in self._quotes if key[1] == book_id]
        for key in stale:
            del self._quotes[key]
        if stale:
            logger.debug("Invalidated %d cached quotes for book %s", len(stale), book_id)
        return len(stale)

    def clear(self) -> None:
        self._quotes.clear()

    def __len__(self) -> int:
        return len(self._quotes)
