"""Character assembly: each stage fills one part of the record, in order.

Stage functions return the stage's value without touching the record;
``apply_stage`` writes it into ``ctx.character`` and ``generate_all`` runs
every stage against a fresh record.
"""

import copy
import logging
from typing import Any, Callable, Dict, Optional

from character_creation.content import find_trait, get_random_entry, get_subrace
from character_creation.context import RANDOM, GenerationContext
from character_creation.errors import MissingCharacterFieldError
from character_creation.ethnicity import fits_mode
from character_creation.life import get_life
from character_creation.names import compose_name, shortened
from character_creation.npc import get_occupation, get_traits
from character_creation.validators import require_fields
from character_creation.weighted import class_weighted, race_weighted

log = logging.getLogger(__name__)


def _locked(ctx: GenerationContext, lock: str, field: str) -> bool:
    """True when the field is locked and there is a previous value to keep."""
    if getattr(ctx.locks, lock) and ctx.previous.get(field) is not None:
        log.debug("Keeping locked %s", field)
        return True
    return False


def recover_ethnicity(ctx: GenerationContext, race: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Read the ethnicity back out of an already resolved race.

    An ethnicity from the other mode has no names here, so it is dropped and
    naming rolls a fresh one.
    """
    race = race if race is not None else ctx.character.get("Race") or {}
    ethnicity = find_trait(race.get("content"), "Ethnicity")
    if isinstance(ethnicity, str) and not fits_mode(ethnicity, ctx):
        log.debug("Dropping ethnicity %s outside %s mode", ethnicity, ctx.ethnicity_mode.value)
        ethnicity = None
    ctx.ethnicity = ethnicity if isinstance(ethnicity, str) else None
    return ctx.ethnicity


def generate_race(ctx: GenerationContext) -> Dict[str, Any]:
    if _locked(ctx, "race", "Race"):
        race = copy.deepcopy(ctx.previous["Race"])
        recover_ethnicity(ctx, race)
        return race

    selection = ctx.options.race or RANDOM
    exponent = ctx.race_mode.exponent
    if selection == RANDOM and exponent is not None:
        selection = race_weighted(
            ctx.corpus.races,
            ctx.corpus.other.get("raceWeights", {}),
            ctx.used_books,
            ctx.rng,
            exponent,
        )
    ctx.ethnicity = None
    race = get_random_entry(ctx.corpus.races, selection, ctx)
    log.debug("Race %s (ethnicity %s)", race["name"], ctx.ethnicity)
    return race


def generate_gender(ctx: GenerationContext) -> str:
    if _locked(ctx, "gender", "Gender"):
        return ctx.previous["Gender"]
    selection = ctx.options.gender or RANDOM
    if selection != RANDOM:
        return selection
    return ctx.rng.pick_one(require_fields(ctx.corpus.other, ["genders"], "other")["genders"])


def generate_name(ctx: GenerationContext) -> Dict[str, str]:
    if _locked(ctx, "name", "Name"):
        return {"Name": ctx.previous["Name"], "ShortName": ctx.previous.get("ShortName", ctx.previous["Name"])}

    manual = (ctx.options.name or "").strip()
    if manual:
        return {"Name": manual, "ShortName": manual}

    missing = [field for field in ("Race", "Gender") if not ctx.character.get(field)]
    if missing:
        raise MissingCharacterFieldError("Name", missing)
    if ctx.ethnicity is None:
        recover_ethnicity(ctx)

    race = ctx.character["Race"]
    name = compose_name(race["name"], ctx.character["Gender"], ctx)
    return {"Name": name, "ShortName": shortened(race["name"], get_subrace(race), name, ctx.rng)}


def generate_class(ctx: GenerationContext) -> Dict[str, Any]:
    if _locked(ctx, "char_class", "Class"):
        return copy.deepcopy(ctx.previous["Class"])
    return get_random_entry(ctx.corpus.classes, ctx.options.char_class or RANDOM, ctx)


def generate_background(ctx: GenerationContext) -> Dict[str, Any]:
    if _locked(ctx, "background", "Background"):
        return copy.deepcopy(ctx.previous["Background"])
    return get_random_entry(ctx.corpus.backgrounds, ctx.options.background or RANDOM, ctx)


def generate_occupation(ctx: GenerationContext, allow_adventurer: bool = False) -> str:
    if _locked(ctx, "occupation", "Occupation"):
        return ctx.previous["Occupation"]
    return get_occupation(ctx.rng, allow_adventurer, lambda: class_weighted(ctx.used_books, ctx.rng))


def generate_npc_traits(ctx: GenerationContext) -> Dict[str, str]:
    if _locked(ctx, "traits", "NPCTraits"):
        return copy.deepcopy(ctx.previous["NPCTraits"])
    return get_traits(ctx.corpus.npcs, ctx.rng)


def generate_life(ctx: GenerationContext) -> Dict[str, Any]:
    if _locked(ctx, "life", "Life"):
        return copy.deepcopy(ctx.previous["Life"])
    if ctx.ethnicity is None:
        recover_ethnicity(ctx)
    return get_life(ctx)


STAGES: Dict[str, Callable[[GenerationContext], Any]] = {
    "race": generate_race,
    "gender": generate_gender,
    "name": generate_name,
    "class": generate_class,
    "background": generate_background,
    "occupation": generate_occupation,
    "traits": generate_npc_traits,
    "life": generate_life,
}
STAGE_FIELDS = {
    "race": "Race",
    "gender": "Gender",
    "class": "Class",
    "background": "Background",
    "occupation": "Occupation",
    "traits": "NPCTraits",
    "life": "Life",
}


def apply_stage(ctx: GenerationContext, stage: str) -> Any:
    """Run one stage and store its result in ``ctx.character``."""
    if stage not in STAGES:
        raise KeyError(stage)
    value = STAGES[stage](ctx)
    if stage == "name":
        ctx.character.update(value)
    else:
        ctx.character[STAGE_FIELDS[stage]] = value
    return value


def generate_all(ctx: GenerationContext) -> Dict[str, Any]:
    """Build a complete record. Any stage error propagates; no partial record is returned."""
    ctx.character = {}
    ctx.ethnicity = None
    for stage in STAGES:
        apply_stage(ctx, stage)
    log.info("Generated %s %s", ctx.character["Race"]["name"], ctx.character["Name"])
    return ctx.character
