"""Public receipt search and name autosuggest."""

import re
from typing import Callable, Iterable, List, Optional

from ..models import Receipt
from .name_matching import name_contains
from .receipt_store import ReceiptStore

SUGGESTION_LIMIT = 5

_DIGIT_RUN = re.compile(r'[0-9]+')


def extract_receipt_number(query: str) -> Optional[int]:
    """
    Extract the first run of digits from a query as a receipt number.

    "YB25-042" yields 25, "42" yields 42, "abc" yields None.
    """
    match = _DIGIT_RUN.search(query or '')
    if not match:
        return None
    return int(match.group(0))


class SearchIndex:
    """
    In-memory projection of one receipt snapshot.

    Each call to :meth:`replace` swaps the whole snapshot; nothing is
    diffed. Bind the index to a store to keep it current from the change
    feed.

    Example::

        index = SearchIndex(store.all())
        unsubscribe = index.bind(store)
        index.suggest('ash')        # ['Asha Rao', 'Ashok Kumar']
        index.search('42', by_name=False)
    """

    def __init__(self, receipts: Iterable[Receipt] = ()):
        self._receipts: List[Receipt] = []
        self._names: List[str] = []
        self.replace(receipts)

    def replace(self, receipts: Iterable[Receipt]) -> None:
        """Replace the indexed snapshot."""
        self._receipts = list(receipts)

        # Deduplicated by exact string: different casings stay separate entries
        names = []
        seen = set()
        for receipt in self._receipts:
            name = receipt.student_name
            if name and name not in seen:
                seen.add(name)
                names.append(name)
        self._names = names

    def bind(self, store: ReceiptStore) -> Callable[[], None]:
        """Subscribe to the store's change feed; returns the unsubscribe function."""
        return store.subscribe(self.replace)

    @property
    def names(self) -> List[str]:
        return list(self._names)

    @property
    def receipts(self) -> List[Receipt]:
        return list(self._receipts)

    def suggest(self, partial_name: str, limit: int = SUGGESTION_LIMIT) -> List[str]:
        """
        Suggest student names containing the partial input.

        Args:
            partial_name: Text typed so far
            limit: Maximum number of suggestions

        Returns:
            Matching names in store order (not ranked)
        """
        if not partial_name:
            return []

        matches = [name for name in self._names if name_contains(name, partial_name)]
        return matches[:limit]

    def search(self, query: str, by_name: bool = True) -> List[Receipt]:
        """
        Search receipts by student name or receipt number.

        Args:
            query: Search text
            by_name: If True, match names containing the query; otherwise
                use the first digit run of the query as an exact receipt number

        Returns:
            Matching receipts in store order
        """
        if not (query or '').strip():
            return []

        if by_name:
            return [
                receipt for receipt in self._receipts
                if receipt.student_name and name_contains(receipt.student_name, query)
            ]

        receipt_number = extract_receipt_number(query)
        if receipt_number is None:
            return []
        return [
            receipt for receipt in self._receipts
            if receipt.receipt_number == receipt_number
        ]


def suggest_names(
    *,
    partial_name: str,
    limit: int = SUGGESTION_LIMIT,
    store: Optional[ReceiptStore] = None
) -> List[str]:
    """Suggest names from a fresh snapshot of the store."""
    store = store or ReceiptStore()
    return SearchIndex(store.all()).suggest(partial_name, limit=limit)


def search_receipts(
    *,
    query: str,
    by_name: bool = True,
    store: Optional[ReceiptStore] = None
) -> List[Receipt]:
    """Search a fresh snapshot of the store."""
    store = store or ReceiptStore()
    return SearchIndex(store.all()).search(query, by_name=by_name)
