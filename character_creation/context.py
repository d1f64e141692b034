from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from character_creation.books import resolve_used_books
from character_creation.corpus import Corpus
from character_creation.randomizer import Randomizer

log = logging.getLogger(__name__)

RANDOM = "Random"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    NONBINARY = "Nonbinary or Unknown"


BINARY_GENDERS = [Gender.MALE.value, Gender.FEMALE.value]


def is_binary(gender: Optional[str]) -> bool:
    return gender in BINARY_GENDERS


class EthnicityMode(str, Enum):
    STANDARD = "standard"
    REAL = "real"
    BOTH = "both"


class RaceMode(str, Enum):
    NORMAL = "normal"
    WEIGHTED = "weighted"
    WEIGHTED15 = "weighted15"
    WEIGHTED20 = "weighted20"

    @property
    def exponent(self) -> Optional[float]:
        return {
            RaceMode.WEIGHTED: 1,
            RaceMode.WEIGHTED15: 1.5,
            RaceMode.WEIGHTED20: 2,
        }.get(self)


@dataclass
class Locks:
    """Per-field flags telling the assembler to keep the previous value."""

    name: bool = False
    traits: bool = False
    occupation: bool = False
    gender: bool = False
    race: bool = False
    char_class: bool = False
    background: bool = False
    life: bool = False

    @classmethod
    def lock_all(cls) -> "Locks":
        return cls(**{f.name: True for f in fields(cls)})

    @classmethod
    def unlock_all(cls) -> "Locks":
        return cls()

    @classmethod
    def from_mapping(cls, flags: Optional[Mapping[str, bool]]) -> "Locks":
        flags = dict(flags or {})
        if "class" in flags:
            flags["char_class"] = flags.pop("class")
        known = {f.name for f in fields(cls)}
        unknown = set(flags) - known
        if unknown:
            raise ValueError(f"Unknown lock fields: {sorted(unknown)}")
        return cls(**{key: bool(value) for key, value in flags.items()})

    def to_dict(self) -> Dict[str, bool]:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["class"] = result.pop("char_class")
        return result


@dataclass
class GenerationOptions:
    books: Sequence[str] = ()
    ethnicity_mode: EthnicityMode = EthnicityMode.STANDARD
    race_mode: RaceMode = RaceMode.NORMAL
    race: str = RANDOM
    gender: str = RANDOM
    char_class: str = RANDOM
    background: str = RANDOM
    name: str = ""
    locks: Locks = field(default_factory=Locks)


@dataclass
class GenerationContext:
    """State for one generation request.

    ``previous`` is the caller's prior record (read only, used for locks);
    ``character`` is the record being built. Stages fill ``character`` in the
    order Race, Gender, Name, Class, Background, Occupation, NPC traits, Life.
    """

    corpus: Corpus
    rng: Randomizer
    used_books: Tuple[str, ...]
    ethnicity_mode: EthnicityMode
    options: GenerationOptions
    race_mode: RaceMode = RaceMode.NORMAL
    previous: Dict[str, Any] = field(default_factory=dict)
    character: Dict[str, Any] = field(default_factory=dict)
    ethnicity: Optional[str] = None

    @classmethod
    def build(
        cls,
        corpus: Corpus,
        options: Optional[GenerationOptions] = None,
        rng: Optional[Randomizer] = None,
        previous: Optional[Mapping[str, Any]] = None,
    ) -> "GenerationContext":
        options = options or GenerationOptions()
        rng = rng or Randomizer()
        available = corpus.available_books or None
        used_books = resolve_used_books(options.books, available)
        mode = EthnicityMode(options.ethnicity_mode)
        if mode is EthnicityMode.BOTH:
            mode = EthnicityMode.STANDARD if rng.uniform_int(2) == 0 else EthnicityMode.REAL
        race_mode = RaceMode(options.race_mode)
        previous_record = copy.deepcopy(dict(previous or {}))
        log.debug("Generation context: books=%s ethnicity_mode=%s", used_books, mode.value)
        return cls(
            corpus=corpus,
            rng=rng,
            used_books=used_books,
            ethnicity_mode=mode,
            options=options,
            race_mode=race_mode,
            previous=previous_record,
            character=copy.deepcopy(previous_record),
        )

    @property
    def locks(self) -> Locks:
        return self.options.locks

    @property
    def race_name(self) -> Optional[str]:
        race = self.character.get("Race")
        return race.get("name") if isinstance(race, Mapping) else None

    @property
    def gender(self) -> Optional[str]:
        return self.character.get("Gender")
