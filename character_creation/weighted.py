"""Probability-weighted race and class draws."""

import logging
from typing import Dict, Mapping, Sequence

from character_creation.books import BASE_BOOK, check_book_special
from character_creation.errors import InfeasibleCountError, NoEligibleEntryError
from character_creation.randomizer import Randomizer
from character_creation.specials import SPECIAL_KEY
from character_creation.tables import CLASS_WEIGHT_TOTAL, CLASS_WEIGHTS, lookup

log = logging.getLogger(__name__)


def race_weights(
    races: Mapping[str, object],
    weight_table: Mapping[str, float],
    used_books: Sequence[str],
    exponent: float = 1,
) -> Dict[str, float]:
    """Effective weight per race, in draw order.

    Table races weigh ``weight ** exponent``. Every other race that is not a
    base-book race and passes the book filter weighs 1.
    """
    weights: Dict[str, float] = {name: weight ** exponent for name, weight in weight_table.items()}
    for name, race in races.items():
        if name in weights or not isinstance(race, Mapping):
            continue
        special = race.get(SPECIAL_KEY, "")
        if BASE_BOOK in special or not check_book_special(special, used_books):
            continue
        weights[name] = 1
    return weights


def race_weighted(
    races: Mapping[str, object],
    weight_table: Mapping[str, float],
    used_books: Sequence[str],
    rng: Randomizer,
    exponent: float = 1,
) -> str:
    weights = race_weights(races, weight_table, used_books, exponent)
    total = sum(weights.values())
    if not weights or total <= 0:
        raise NoEligibleEntryError("No races are available for a weighted draw", {"books": list(used_books)})
    remainder = rng.uniform_real(total)
    chosen = None
    for name, weight in weights.items():
        chosen = name
        remainder -= weight
        if remainder <= 0:
            break
    log.debug("Weighted race draw (exponent %s) chose %s", exponent, chosen)
    return chosen


def class_weighted(used_books: Sequence[str], rng: Randomizer) -> str:
    """Class draw skewed toward the common classes; gated classes need their book."""
    for _ in range(rng.max_attempts):
        name, book = lookup(CLASS_WEIGHTS, rng.uniform_int(CLASS_WEIGHT_TOTAL))
        if book is None or book in used_books:
            return name
    raise InfeasibleCountError(f"No class drawn in {rng.max_attempts} attempts")
