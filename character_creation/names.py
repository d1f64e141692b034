"""Race, gender and ethnicity conditioned name composition."""

import logging
import re
from typing import Any, Callable, Dict, Mapping, Optional

from character_creation.content import find_trait, get_subrace
from character_creation.context import BINARY_GENDERS, EthnicityMode, GenerationContext, is_binary
from character_creation.errors import MissingCorpusFieldError
from character_creation.ethnicity import UNKNOWN, character_ethnicity, random_ethnicity
from character_creation.randomizer import Randomizer
from character_creation.validators import require_fields

log = logging.getLogger(__name__)

Composer = Callable[[GenerationContext, Optional[str]], str]

DEFAULT_ELF_AGE = 100
_AGE_RE = re.compile(r"^\s*(\d+)")


def random_gender(rng: Randomizer) -> str:
    return rng.pick_one(BINARY_GENDERS)


def _names(ctx: GenerationContext, key: str) -> Any:
    return require_fields(ctx.corpus.names, [key], "names")[key]


def _pool(node: Any, key: str, where: str) -> Any:
    return require_fields(node, [key], where)[key]


def gendered(node: Mapping[str, Any], gender: Optional[str], rng: Randomizer, where: str = "names") -> str:
    """Pick from the Male/Female list; other genders pick a binary list at random first."""
    key = gender if is_binary(gender) else random_gender(rng)
    return rng.pick_one(_pool(node, key, where))


def first_last(node: Mapping[str, Any], surname_key: str, gender: Optional[str], rng: Randomizer, where: str = "names") -> str:
    return gendered(node, gender, rng, where) + " " + rng.pick_one(_pool(node, surname_key, where))


def _resolve_ethnicity(ethnicity: Optional[str], ctx: GenerationContext) -> str:
    if not ethnicity or ethnicity == UNKNOWN:
        return random_ethnicity(ctx)
    return ethnicity


def human_first(ethnicity: Optional[str], gender: Optional[str], ctx: GenerationContext) -> str:
    ethnicity = _resolve_ethnicity(ethnicity, ctx)
    if ctx.ethnicity_mode is EthnicityMode.REAL:
        return gendered(_pool(_names(ctx, "Human (Real)"), ethnicity, "Human (Real) names"), gender, ctx.rng)
    humans = _names(ctx, "Human")
    source = "Chondathan" if ethnicity == "Tethyrian" else ethnicity
    return gendered(_pool(humans, source, "Human names"), gender, ctx.rng, f"{source} names")


def human_last(ethnicity: Optional[str], ctx: GenerationContext) -> str:
    """Surname with its leading space, or an empty string when there is none."""
    if ctx.ethnicity_mode is EthnicityMode.REAL:
        return ""
    ethnicity = _resolve_ethnicity(ethnicity, ctx)
    if ethnicity in ("Tuigan", "Ulutiun"):
        return ""
    humans = _names(ctx, "Human")
    if ethnicity == "Bedine":
        return " " + ctx.rng.pick_one(_pool(_pool(humans, "Bedine", "Human names"), "Tribe", "Bedine names"))
    source = "Chondathan" if ethnicity == "Tethyrian" else ethnicity
    return " " + ctx.rng.pick_one(_pool(_pool(humans, source, "Human names"), "Surname", f"{source} names"))


def human_name(ethnicity: Optional[str], gender: Optional[str], ctx: GenerationContext) -> str:
    ethnicity = _resolve_ethnicity(ethnicity, ctx)
    last = human_last(ethnicity, ctx)
    return human_first(ethnicity, gender, ctx) + last


def _character_age(ctx: GenerationContext) -> int:
    """The elf character's age; elves named for a non-elf character count as 100."""
    if ctx.race_name != "Elf":
        return DEFAULT_ELF_AGE
    race = ctx.character.get("Race") or {}
    age = find_trait(race.get("content"), "Age")
    match = _AGE_RE.match(age) if isinstance(age, str) else None
    return int(match.group(1)) if match else DEFAULT_ELF_AGE


def _direct(key: str) -> Composer:
    return lambda ctx, gender: ctx.rng.pick_one(_names(ctx, key))


def _gendered(key: str) -> Composer:
    return lambda ctx, gender: gendered(_names(ctx, key), gender, ctx.rng, f"{key} names")


def _first_last(key: str, surname_key: str) -> Composer:
    return lambda ctx, gender: first_last(_names(ctx, key), surname_key, gender, ctx.rng, f"{key} names")


def _human_style(ctx: GenerationContext, gender: Optional[str]) -> str:
    return human_name(character_ethnicity(ctx), gender, ctx)


def _human(ctx: GenerationContext, gender: Optional[str]) -> str:
    return human_name(ctx.ethnicity, gender, ctx)


def _dwarf(ctx, gender):
    dwarves = _names(ctx, "Dwarf")
    if get_subrace(ctx.character.get("Race")) == "Duergar":
        return gendered(dwarves, gender, ctx.rng, "Dwarf names") + " " + ctx.rng.pick_one(
            _pool(dwarves, "Clan (Duergar)", "Dwarf names")
        )
    return first_last(dwarves, "Clan", gender, ctx.rng, "Dwarf names")


def _elf(ctx, gender):
    subrace = get_subrace(ctx.character.get("Race"))
    if subrace == "Drow":
        return first_last(_names(ctx, "Drow"), "Family", gender, ctx.rng, "Drow names")
    if subrace == "Shadar-kai":
        return gendered(_names(ctx, "Shadar-kai"), gender, ctx.rng, "Shadar-kai names")
    elves = _names(ctx, "Elf")
    # Elves below adulthood go by a child name.
    if _character_age(ctx) < 80 + ctx.rng.uniform_int(40):
        return ctx.rng.pick_one(_pool(elves, "Child", "Elf names")) + " " + ctx.rng.pick_one(
            _pool(elves, "Family", "Elf names")
        )
    return first_last(elves, "Family", gender, ctx.rng, "Elf names")


def _gith(ctx, gender):
    key = "Githyanki" if get_subrace(ctx.character.get("Race")) == "Githyanki" else "Githzerai"
    return gendered(_names(ctx, key), gender, ctx.rng, f"{key} names")


def _gnome(ctx, gender):
    gnomes = _names(ctx, "Gnome")
    if get_subrace(ctx.character.get("Race")) == "Deep Gnome":
        return first_last(_names(ctx, "Deep Gnome"), "Clan", gender, ctx.rng, "Deep Gnome names")
    rng = ctx.rng
    count = 4 + rng.uniform_int(4)
    given = rng.draw_distinct(lambda: gendered(gnomes, gender, rng, "Gnome names"), count)
    nickname = rng.pick_one(_pool(gnomes, "Nickname", "Gnome names"))
    clan = rng.pick_one(_pool(gnomes, "Clan", "Gnome names"))
    return f'{" ".join(given)} "{nickname}" {clan}'


def _goliath(ctx, gender):
    goliaths = _names(ctx, "Goliath")
    rng = ctx.rng
    birth = rng.pick_one(_pool(goliaths, "Birth", "Goliath names"))
    nickname = rng.pick_one(_pool(goliaths, "Nickname", "Goliath names"))
    clan = rng.pick_one(_pool(goliaths, "Clan", "Goliath names"))
    return f'{birth} "{nickname}" {clan}'


def _half_elf(ctx, gender):
    roll = ctx.rng.uniform_int(6)
    elves = _names(ctx, "Drow") if get_subrace(ctx.character.get("Race")) == "Drow" else _names(ctx, "Elf")
    if roll < 2:
        return human_first(character_ethnicity(ctx), gender, ctx) + " " + ctx.rng.pick_one(
            _pool(elves, "Family", "Elf names")
        )
    if roll < 4:
        return gendered(elves, gender, ctx.rng, "Elf names") + human_last(character_ethnicity(ctx), ctx)
    if roll < 5:
        return human_name(character_ethnicity(ctx), gender, ctx)
    return first_last(elves, "Family", gender, ctx.rng, "Elf names")


def _half_orc(ctx, gender):
    roll = ctx.rng.uniform_int(4)
    orcs = _names(ctx, "Orc")
    if roll < 1:
        return gendered(orcs, gender, ctx.rng, "Orc names")
    if roll < 2:
        return gendered(orcs, gender, ctx.rng, "Orc names") + human_last(character_ethnicity(ctx), ctx)
    return human_name(character_ethnicity(ctx), gender, ctx)


def _satyr(ctx, gender):
    satyrs = _names(ctx, "Satyr")
    first = gendered(satyrs, gender, ctx.rng, "Satyr names")
    nickname = ctx.rng.pick_one(_pool(satyrs, "Nicknames", "Satyr names"))
    return f'{first} "{nickname}"'


def _simic_hybrid(ctx, gender):
    template = ctx.rng.pick_one(["Human", "Elf", "Vedalken"])
    if template == "Human":
        return human_name(random_ethnicity(ctx), gender, ctx)
    return gendered(_names(ctx, template), gender, ctx.rng, f"{template} names")


def _tabaxi(ctx, gender):
    tabaxi = _names(ctx, "Tabaxi")
    return ctx.rng.pick_one(_pool(tabaxi, "Name", "Tabaxi names")) + " " + ctx.rng.pick_one(
        _pool(tabaxi, "Clan", "Tabaxi names")
    )


def _tiefling(ctx, gender):
    rng = ctx.rng
    if rng.uniform_int(5) < 2:
        return human_name(character_ethnicity(ctx), gender, ctx)
    last = human_last(character_ethnicity(ctx), ctx)
    # One in three tieflings take an infernal name over a virtue name.
    if rng.uniform_int(3) == 0:
        return gendered(_names(ctx, "Infernal"), gender, rng, "Infernal names") + last
    return rng.pick_one(_names(ctx, "Virtue")) + last


COMPOSERS: Dict[str, Composer] = {
    "Aarakocra": _direct("Aarakocra"),
    "Changeling": _direct("Changeling"),
    "Grung": _direct("Grung"),
    "Kenku": _direct("Kenku"),
    "Kobold": _direct("Kobold"),
    "Lizardfolk": _direct("Lizardfolk"),
    "Locathah": _direct("Locathah"),
    "Shifter": _direct("Shifter"),
    "Tortle": _direct("Tortle"),
    "Verdan": _direct("Verdan"),
    "Warforged": _direct("Warforged"),
    "Kalashtar": _direct("Kalashtar/Quori"),
    "Yuan-Ti Pureblood": _direct("Yuan-Ti"),
    "Bugbear": _gendered("Goblinoid"),
    "Goblin": _gendered("Goblinoid"),
    "Hobgoblin": _gendered("Goblinoid"),
    "Centaur": _gendered("Centaur"),
    "Minotaur": _gendered("Minotaur"),
    "Orc": _gendered("Orc"),
    "Leonin": _gendered("Leonin"),
    "Loxodon": _gendered("Loxodon"),
    "Vedalken": _gendered("Vedalken"),
    "Firbolg": _gendered("Elf"),
    "Aasimar": _human_style,
    "Dhampir": _human_style,
    "Genasi": _human_style,
    "Hexblood": _human_style,
    "Reborn": _human_style,
    "Dragonborn": _first_last("Dragonborn", "Clan"),
    "Halfling": _first_last("Halfling", "Family"),
    "Triton": _first_last("Triton", "Surname"),
    "Dwarf": _dwarf,
    "Elf": _elf,
    "Gith": _gith,
    "Gnome": _gnome,
    "Goliath": _goliath,
    "Half-Elf": _half_elf,
    "Half-Orc": _half_orc,
    "Human": _human,
    "Satyr": _satyr,
    "Simic Hybrid": _simic_hybrid,
    "Tabaxi": _tabaxi,
    "Tiefling": _tiefling,
}


def compose_name(race_name: str, gender: Optional[str], ctx: GenerationContext) -> str:
    composer = COMPOSERS.get(race_name)
    if composer is None:
        raise MissingCorpusFieldError("naming rules", [race_name])
    name = composer(ctx, gender)
    log.debug("Composed %s name %r", race_name, name)
    return name


def shortened(race_name: str, subrace: Optional[str], name: str, rng: Randomizer) -> str:
    """Short form for races whose full names are unwieldy."""
    if race_name == "Gnome" and subrace != "Deep Gnome":
        parts = name.split(" ")
        if len(parts) < 3:
            return name
        first = parts[rng.uniform_int(len(parts) - 2)]
        return f"{first} {parts[-2]} {parts[-1]}"
    if race_name == "Tabaxi":
        nickname_at = name.find('"')
        return name[nickname_at:] if nickname_at >= 0 else name
    return name
