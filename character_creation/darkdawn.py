"""Dark Dawn character sheets: one uniform pick per flat pool."""

import copy
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from character_creation.corpus import DarkDawnCorpus
from character_creation.randomizer import Randomizer

log = logging.getLogger(__name__)


@dataclass
class DarkDawnLocks:
    name: bool = False
    race: bool = False
    faction: bool = False
    faction_ability: bool = False
    char_class: bool = False
    deity: bool = False
    special_ability: bool = False

    @classmethod
    def lock_all(cls) -> "DarkDawnLocks":
        return cls(**{f.name: True for f in fields(cls)})

    @classmethod
    def from_mapping(cls, flags: Optional[Mapping[str, bool]]) -> "DarkDawnLocks":
        aliases = {"class": "char_class", "factionAbility": "faction_ability", "specialAbility": "special_ability"}
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in (flags or {}).items():
            key = aliases.get(key, key)
            if key not in known:
                raise ValueError(f"Unknown lock field: {key}")
            values[key] = bool(value)
        return cls(**values)


def _pick(pool: Mapping[str, Any], rng: Randomizer) -> Any:
    return copy.deepcopy(pool[rng.pick_one(list(pool))])


def generate_dark_dawn(
    corpus: DarkDawnCorpus,
    rng: Randomizer,
    locks: Optional[DarkDawnLocks] = None,
    previous: Optional[Mapping[str, Any]] = None,
    name: str = "",
) -> Dict[str, Any]:
    locks = locks or DarkDawnLocks()
    previous = previous or {}

    def keep(lock: str, field: str) -> bool:
        return getattr(locks, lock) and bool(previous.get(field))

    character: Dict[str, Any] = {}
    for lock, field, pool in (
        ("race", "Race", corpus.races),
        ("faction", "Faction", corpus.factions),
        ("char_class", "Class", corpus.classes),
        ("deity", "Deity", corpus.deities),
        ("special_ability", "SpecialAbility", corpus.special_abilities),
    ):
        character[field] = copy.deepcopy(previous[field]) if keep(lock, field) else _pick(pool, rng)

    if keep("faction_ability", "FactionAbility"):
        character["FactionAbility"] = previous["FactionAbility"]
    else:
        abilities = (character["Faction"] or {}).get("abilities") or []
        character["FactionAbility"] = rng.pick_one(abilities) if abilities else None

    character["Name"] = previous["Name"] if keep("name", "Name") else (name or "")
    log.debug("Dark Dawn character %r", character["Name"])
    return character
