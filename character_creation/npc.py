"""NPC personality traits and occupations, as rolled in the DMG."""

from typing import Any, Callable, Dict, Mapping, Optional

from character_creation.errors import MissingCorpusFieldError
from character_creation.randomizer import Randomizer
from character_creation.tables import OCCUPATIONS, lookup
from character_creation.validators import require_fields

NPC_TABLES = [
    "appearances",
    "highAbilities",
    "lowAbilities",
    "talents",
    "mannerisms",
    "interactionTraits",
    "ideals",
    "bonds",
    "flawsAndSecrets",
]
BOND_COUNT = 9


def _bond(bonds, rng: Randomizer) -> str:
    roll = rng.uniform_int(BOND_COUNT + 1)
    if roll < BOND_COUNT:
        return bonds[roll]
    first = rng.uniform_int(BOND_COUNT)
    second = rng.draw_until(lambda: rng.uniform_int(BOND_COUNT), lambda index: index != first)
    return bonds[first] + ", " + bonds[second]


def get_traits(npcs: Mapping[str, Any], rng: Randomizer) -> Dict[str, str]:
    require_fields(npcs, NPC_TABLES, "npcs")
    if len(npcs["bonds"]) < BOND_COUNT:
        raise MissingCorpusFieldError("npcs.bonds", [f"bond {i + 1}" for i in range(len(npcs["bonds"]), BOND_COUNT)])

    traits = {"Appearance": rng.pick_one(npcs["appearances"])}

    # The low ability skips the high ability's slot, so they never match.
    high = rng.uniform_int(len(npcs["highAbilities"]))
    low = rng.uniform_int(len(npcs["lowAbilities"]) - 1)
    if low >= high:
        low += 1
    traits["High Ability"] = npcs["highAbilities"][high]
    traits["Low Ability"] = npcs["lowAbilities"][low]

    traits["Talent"] = rng.pick_one(npcs["talents"])
    traits["Mannerism"] = rng.pick_one(npcs["mannerisms"])
    traits["Interaction Trait"] = rng.pick_one(npcs["interactionTraits"])
    ideal = rng.pick_one(npcs["ideals"])
    traits["Values"] = ideal + ", " + _bond(npcs["bonds"], rng)
    traits["Flaw or Secret"] = rng.pick_one(npcs["flawsAndSecrets"])
    return traits


def get_occupation(
    rng: Randomizer,
    allow_adventurer: bool = False,
    class_picker: Optional[Callable[[], str]] = None,
) -> str:
    occupation = lookup(OCCUPATIONS, rng.uniform_int(100 if allow_adventurer else 99))
    if occupation is not None:
        return occupation
    adventurer_class = class_picker() if class_picker else "Adventurer"
    return f"Adventurer ({adventurer_class})"
