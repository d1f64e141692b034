"""Biography generation: origin, siblings, life events and a trinket.

Stages run in order and later stages read what earlier ones produced: the
parents text decides sibling races, and the character's race and name
constrain siblings and life events.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from character_creation.context import GenerationContext
from character_creation.errors import MissingCharacterFieldError
from character_creation.ethnicity import character_ethnicity
from character_creation.names import compose_name, human_name
from character_creation.npc import get_occupation
from character_creation.randomizer import Randomizer
from character_creation.tables import (
    ABSENT_PARENT_REASONS,
    ALIGNMENTS,
    BIRTH_ORDERS,
    BOTH_PARENTS,
    CHILDHOOD_HOMES,
    CHILDHOOD_MEMORIES,
    CONSTRUCTION_ORDERS,
    JOB_EVENT,
    LIFE_EVENT_BONUS_CATEGORY,
    LIFESTYLES,
    RAISED_BY,
    RELATIONSHIPS,
    STATUSES,
    lookup,
)
from character_creation.validators import require_fields, require_path
from character_creation.weighted import class_weighted, race_weighted

log = logging.getLogger(__name__)

CONSTRUCTED_RACE = "Warforged"

# Parents text -> sibling race pool, per mixed-heritage race.
SIBLING_HERITAGE: Dict[str, List[Tuple[str, List[str]]]] = {
    "Half-Elf": [
        ("One parent was an elf and the other was a half-elf.", ["Elf", "Half-Elf"]),
        ("One parent was a human and the other was a half-elf.", ["Human", "Half-Elf"]),
    ],
    "Half-Orc": [
        ("One parent was an orc and the other was a half-orc.", ["Orc", "Half-Orc"]),
        ("One parent was a human and the other was a half-orc.", ["Human", "Half-Orc"]),
    ],
    "Tiefling": [
        (
            "Both parents were humans, their infernal heritage dormant until you came along.",
            ["Human", "Human", "Human", "Tiefling"],
        ),
        ("One parent was a tiefling and the other was a human.", ["Human", "Tiefling"]),
    ],
    "Genasi": [
        ("One parent was a genasi and the other was a human.", ["Human", "Genasi"]),
        (
            "Both parents were humans, their elemental heritage dormant until you came along.",
            ["Human", "Human", "Human", "Genasi"],
        ),
    ],
    "Aasimar": [
        ("Both parents were humans, their celestial heritage dormant until you came along.", ["Human"]),
    ],
}
# Races whose siblings fall back to a pool instead of the race itself.
SIBLING_FALLBACK = {"Aasimar": ["Human", "Aasimar"]}


def _canonical(text: Optional[str]) -> str:
    # The corpus spells "an human" in places; treat it as "a human".
    return " ".join((text or "").lower().replace("an human", "a human").split())


def alignment(rng: Randomizer) -> str:
    result = lookup(ALIGNMENTS, rng.roll("3d6"))
    return rng.pick_one(result) if isinstance(result, list) else result


def raised_by(rng: Randomizer) -> str:
    return lookup(RAISED_BY, rng.uniform_int(100))


def absent_parent(rng: Randomizer) -> str:
    return rng.pick_one(ABSENT_PARENT_REASONS)


def lifestyle(rng: Randomizer) -> Tuple[str, int]:
    return lookup(LIFESTYLES, rng.roll("3d6"))


def childhood_home(rng: Randomizer, modifier: int) -> str:
    return lookup(CHILDHOOD_HOMES, rng.uniform_int(100) + modifier)


def childhood_memories(rng: Randomizer) -> str:
    return lookup(CHILDHOOD_MEMORIES, rng.roll("3d6") + rng.uniform_int(5) - 1)


def status(rng: Randomizer) -> str:
    return lookup(STATUSES, rng.roll("3d6"))


def relationship(rng: Randomizer) -> str:
    return lookup(RELATIONSHIPS, rng.roll("3d4"))


def origin(ctx: GenerationContext) -> Dict[str, str]:
    rng = ctx.rng
    life = ctx.corpus.life
    origins = require_fields(life, ["origins"], "life")["origins"]
    birthplaces = require_fields(origins, ["Birthplace"], "life.origins")["Birthplace"]
    race_name = ctx.race_name

    result: Dict[str, str] = {}
    result["Built" if race_name == CONSTRUCTED_RACE else "Birthplace"] = rng.pick_one(birthplaces)
    parents = (origins.get("Parents") or {}).get(race_name)
    if parents is not None:
        result["Parents"] = rng.pick_one(parents)

    raised = raised_by(rng)
    result["Raised By"] = raised
    if raised != BOTH_PARENTS:
        result["Absent Parent(s)"] = absent_parent(rng)

    style, modifier = lifestyle(rng)
    result["Family Lifestyle"] = style
    result["Childhood Home"] = childhood_home(rng, modifier)
    result["Childhood Memories"] = childhood_memories(rng)
    return result


def sibling_race(race_name: str, parents: Optional[str], rng: Randomizer) -> str:
    parents_text = _canonical(parents)
    for text, pool in SIBLING_HERITAGE.get(race_name, []):
        if parents_text == _canonical(text):
            return pool[0] if len(pool) == 1 else rng.pick_one(pool)
    if race_name in SIBLING_FALLBACK:
        return rng.pick_one(SIBLING_FALLBACK[race_name])
    return race_name


def sibling_name(race_name: str, gender: Optional[str], ctx: GenerationContext) -> str:
    """A sibling's first name, with any trailing family name dropped.

    Elf siblings of an elf share the character's age for the child-name gate;
    elf siblings of other races are taken to be 100.
    """
    if race_name == "Tabaxi":
        tabaxi = require_path(ctx.corpus.names, ("Tabaxi", "Name"), "names")
        return ctx.rng.pick_one(tabaxi)
    if race_name == "Human" and ctx.race_name != "Human":
        name = human_name(character_ethnicity(ctx), gender, ctx)
    else:
        name = compose_name(race_name, gender, ctx)
    first, space, _ = name.rpartition(" ")
    return first if space else name


def siblings(ctx: GenerationContext, parents: Optional[str]) -> Optional[Dict[str, Dict[str, str]]]:
    rng = ctx.rng
    count = rng.uniform_int(3)
    if count == 0:
        return None

    own_name = ctx.character["Name"]
    result: Dict[str, Dict[str, str]] = {}
    for _ in range(count):
        sibling: Dict[str, str] = {}
        race = sibling_race(ctx.race_name, parents, rng)
        if race != CONSTRUCTED_RACE:
            sibling["Gender"] = rng.pick_one(require_fields(ctx.corpus.other, ["genders"], "other")["genders"])
        sibling["Race"] = race

        name = rng.draw_until(
            lambda: sibling_name(race, sibling.get("Gender"), ctx),
            lambda candidate: candidate != own_name[: len(candidate)] and candidate not in result,
        )
        sibling["Alignment"] = alignment(rng)
        sibling["Occupation"] = get_occupation(rng, True, lambda: class_weighted(ctx.used_books, rng))
        sibling["Status"] = status(rng)
        sibling["Relationship"] = relationship(rng)
        order_roll = rng.roll("2d6")
        if race == CONSTRUCTED_RACE:
            sibling["Order of Construction"] = lookup(CONSTRUCTION_ORDERS, order_roll)
        else:
            sibling["Birth Order"] = lookup(BIRTH_ORDERS, order_roll)
        result[name] = sibling
    return result


def _weighted_race(ctx: GenerationContext) -> str:
    return race_weighted(
        ctx.corpus.races,
        ctx.corpus.other.get("raceWeights", {}),
        ctx.used_books,
        ctx.rng,
    )


def life_event(category: str, ctx: GenerationContext) -> str:
    rng = ctx.rng
    tables = ctx.corpus.life["eventTables"]
    if category == "Marriage":
        spouse = ctx.race_name if rng.uniform_int(3) < 2 else _weighted_race(ctx)
        occupation = get_occupation(rng, True, lambda: class_weighted(ctx.used_books, rng))
        return f"You fell in love or got married to a(n) {spouse.lower()} {occupation.lower()}."
    if category == "Friend":
        race = _weighted_race(ctx)
        return f"You made a friend of a(n) {race.lower()} {class_weighted(ctx.used_books, rng).lower()}."
    if category == "Enemy":
        race = _weighted_race(ctx)
        adventurer_class = class_weighted(ctx.used_books, rng)
        blame = "You are to blame for the rift." if rng.roll("1d6") % 2 else "You are blameless."
        return f"You made an enemy of a(n) {race.lower()} {adventurer_class.lower()}. {blame}"
    if category == "Job":
        return JOB_EVENT
    if category == "Someone Important":
        race = _weighted_race(ctx)
        return f"You met an important {race.lower()}, who is {relationship(rng).lower()} towards you."
    if category == "Adventure":
        adventures = require_fields(tables, ["Adventure"], "life.eventTables")["Adventure"]
        roll = rng.uniform_int(100)
        return adventures[10] if roll == 99 else adventures[roll // 10]
    if category == "Crime":
        require_fields(tables, ["Crime", "Punishment"], "life.eventTables")
        return rng.pick_one(tables["Crime"]) + ". " + rng.pick_one(tables["Punishment"])
    return rng.pick_one(require_fields(tables, [category], "life.eventTables")[category])


def life_events(ctx: GenerationContext) -> Dict[str, str]:
    rng = ctx.rng
    tables = require_path(ctx.corpus.life, ("eventTables",), "life")
    categories = require_fields(tables, ["Life Events"], "life.eventTables")["Life Events"]

    def draw_category() -> str:
        roll = rng.uniform_int(100)
        return LIFE_EVENT_BONUS_CATEGORY if roll == 99 else categories[roll // 5]

    count = 3 + rng.uniform_int(3)
    events: Dict[str, str] = {}
    for _ in range(count):
        category = rng.draw_until(draw_category, lambda candidate: candidate not in events)
        events[category] = life_event(category, ctx)
    log.debug("Life event categories: %s", list(events))
    return events


def get_life(ctx: GenerationContext) -> Dict[str, Any]:
    missing = [field for field in ("Race", "Name") if not ctx.character.get(field)]
    if missing:
        raise MissingCharacterFieldError("Life", missing)
    rng = ctx.rng
    life = {"Alignment": alignment(rng), "Origin": origin(ctx)}
    life["Siblings"] = siblings(ctx, life["Origin"].get("Parents"))
    life["Life Events"] = life_events(ctx)
    life["Trinket"] = rng.pick_one(require_fields(ctx.corpus.life, ["trinkets"], "life")["trinkets"])
    return life
