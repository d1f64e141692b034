"""Source-book availability checks."""

import logging
from typing import Iterable, Optional, Sequence, Tuple

log = logging.getLogger(__name__)

UNIVERSAL_BOOKS = ("Real", "PHB")
BASE_BOOK = "PHB"
BOOK_PREFIX = "book-"


def resolve_used_books(selected: Iterable[str] = (), available: Optional[Sequence[str]] = None) -> Tuple[str, ...]:
    """Ordered, de-duplicated book codes; the universal ones always come first."""
    used = list(UNIVERSAL_BOOKS)
    for book in selected:
        book = book.strip()
        if not book or book in used:
            continue
        if available is not None and book not in available:
            log.warning("Ignoring unknown book code %r", book)
            continue
        used.append(book)
    return tuple(used)


def check_book_string(book_string: str, used_books: Sequence[str]) -> bool:
    """True when any used book code occurs in ``book_string``."""
    return any(book in book_string for book in used_books)


def check_book_special(special: str, used_books: Sequence[str]) -> bool:
    # Only the first book clause decides; no book clause means unavailable.
    for clause in special.split(" "):
        if clause.startswith(BOOK_PREFIX):
            return check_book_string(clause[len(BOOK_PREFIX):], used_books)
    return False
