"""Recursive resolution of corpus nodes into resolved traits.

A corpus node is a scalar, a list (pick one uniformly) or a mapping. Mappings
resolve to an ordered list of ``{"name": key, "content": value}`` traits;
children resolving to ``None`` are dropped, and a mapping with nothing left
resolves to ``None`` itself.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from character_creation.books import check_book_special
from character_creation.context import RANDOM, GenerationContext
from character_creation.errors import NoEligibleEntryError
from character_creation.specials import SPECIAL_KEY, apply_special, parse_specials

log = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (dict, list)) and not value)


def resolve(node: Any, ctx: GenerationContext) -> Any:
    if node is None:
        return None
    if isinstance(node, list):
        if not node:
            return None
        return resolve(ctx.rng.pick_one(node), ctx)
    if isinstance(node, dict):
        if SPECIAL_KEY in node:
            return resolve_special(node, ctx)
        traits = []
        for name, child in node.items():
            content = resolve(child, ctx)
            if content is not None:
                traits.append({"name": name, "content": content})
        return traits or None
    return node


def resolve_special(node: Dict[str, Any], ctx: GenerationContext) -> Any:
    working: Any = {key: value for key, value in node.items() if key != SPECIAL_KEY}
    for special in parse_specials(node[SPECIAL_KEY]):
        working = apply_special(special, working, ctx)
        if working is None:
            break
    if _is_empty(working):
        return None
    return resolve(working, ctx)


def eligible_entries(collection: Mapping[str, Any], used_books) -> List[str]:
    """Entries that may be drawn at random: tagged, and passing the book filter."""
    return [
        name
        for name, entry in collection.items()
        if isinstance(entry, Mapping)
        and SPECIAL_KEY in entry
        and check_book_special(entry[SPECIAL_KEY], used_books)
    ]


def selectable_entries(collection: Mapping[str, Any], used_books) -> List[str]:
    """Menu options: ``Random`` plus every untagged or book-eligible entry."""
    options = [RANDOM]
    for name, entry in collection.items():
        if (
            not isinstance(entry, Mapping)
            or SPECIAL_KEY not in entry
            or check_book_special(entry[SPECIAL_KEY], used_books)
        ):
            options.append(name)
    return options


def get_random_entry(collection: Mapping[str, Any], selection: str, ctx: GenerationContext) -> Dict[str, Any]:
    if selection != RANDOM:
        if selection not in collection:
            raise NoEligibleEntryError(f"Unknown entry: {selection}", {"selection": selection})
        name = selection
    else:
        candidates = eligible_entries(collection, ctx.used_books)
        if not candidates:
            raise NoEligibleEntryError(
                "No entries are available with the selected books",
                {"books": list(ctx.used_books)},
            )
        name = ctx.rng.pick_one(candidates)
    log.debug("Resolving entry %r", name)
    return {"name": name, "content": resolve(collection[name], ctx)}


def find_trait(traits: Any, name: str) -> Optional[Any]:
    """Depth-first search of resolved traits for the first one called ``name``."""
    if not isinstance(traits, list):
        return None
    for trait in traits:
        if not isinstance(trait, Mapping):
            continue
        if trait.get("name") == name:
            return trait.get("content")
        found = find_trait(trait.get("content"), name)
        if found is not None:
            return found
    return None


def get_subrace(race: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not race:
        return None
    for trait in race.get("content") or []:
        if isinstance(trait, Mapping) and trait.get("name") == "Subraces and Variants":
            for variant in trait.get("content") or []:
                if isinstance(variant, Mapping) and variant.get("name") == "Subrace":
                    return variant.get("content")
    return None
