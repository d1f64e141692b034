"""Transforms applied to corpus nodes tagged with ``_special``.

A tag is a space-separated list of ``opcode`` or ``opcode-argument`` tokens.
Tokens are parsed once per distinct tag into ``Special`` values and applied in
declared order; a handler returning ``None`` suppresses the node and stops
the chain.
"""

import logging
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from character_creation.books import check_book_string
from character_creation.context import GenerationContext, Gender
from character_creation.ethnicity import UNKNOWN, random_ethnicity
from character_creation.validators import require_fields

log = logging.getLogger(__name__)

SPECIAL_KEY = "_special"


class Opcode(str, Enum):
    BOOK = "book"
    BOOKSORT = "booksort"
    CHARACTERISTICS = "characteristics"
    GENDERSORT = "gendersort"
    HALFETHNICITY = "halfethnicity"
    HUMANETHNICITY = "humanethnicity"
    SUBRACESORT = "subracesort"
    DRAGONBORNVARIANTTYPE = "dragonbornvarianttype"
    DRAGONMARKVARIANT = "dragonmarkvariant"
    TIEFLINGAPPEARANCE = "tieflingappearance"
    TIEFLINGVARIANTTYPE = "tieflingvarianttype"
    MONSTROUSORIGIN = "monstrousorigin"
    BACKGROUNDTRAITS = "backgroundtraits"
    RAVNICACONTACTS = "ravnicacontacts"
    DIMIRCONTACTS = "dimircontacts"


class Special(NamedTuple):
    opcode: Opcode
    argument: Optional[str] = None


Handler = Callable[[Dict[str, Any], GenerationContext, Optional[str]], Any]
_HANDLERS: Dict[Opcode, Handler] = {}


def handles(opcode: Opcode):
    def register(func: Handler) -> Handler:
        _HANDLERS[opcode] = func
        return func

    return register


@lru_cache(maxsize=None)
def parse_specials(tag: str) -> Tuple[Special, ...]:
    specials = []
    for token in tag.split():
        name, _, argument = token.partition("-")
        try:
            opcode = Opcode(name)
        except ValueError:
            log.warning("Ignoring unknown special %r in tag %r", token, tag)
            continue
        specials.append(Special(opcode, argument or None))
    return tuple(specials)


def apply_special(special: Special, node: Any, ctx: GenerationContext) -> Any:
    # Scalars produced by an earlier opcode pass through untouched.
    if not isinstance(node, dict):
        return node
    return _HANDLERS[special.opcode](node, ctx, special.argument)


def book_sort(node: Dict[str, Any], used_books: Sequence[str], rng) -> Any:
    """Pick one value from the merged pools of every usable book key."""
    pool: List[Any] = []
    for book_name, entries in node.items():
        if book_name == SPECIAL_KEY or not check_book_string(book_name, used_books):
            continue
        if isinstance(entries, list):
            pool.extend(entries)
        else:
            pool.append(entries)
    if not pool:
        log.debug("No usable book pools among %s", [key for key in node if key != SPECIAL_KEY])
        return None
    return rng.pick_one(pool)


def _requires_book(book: str, node: Dict[str, Any], ctx: GenerationContext) -> Optional[List[Any]]:
    if book not in ctx.used_books:
        return None
    return require_fields(node, ["_array"], f"{book} variant")["_array"]


@handles(Opcode.BOOK)
def _book(node, ctx, argument):
    return node if check_book_string(argument or "", ctx.used_books) else None


@handles(Opcode.BOOKSORT)
def _booksort(node, ctx, argument):
    return book_sort(node, ctx.used_books, ctx.rng)


@handles(Opcode.CHARACTERISTICS)
def _characteristics(node, ctx, argument):
    require_fields(
        node,
        ["minage", "maxage", "baseheight", "heightmod", "baseweight", "weightmod"],
        "characteristics",
    )
    rng = ctx.rng
    span = node["maxage"] - node["minage"]
    age = node["minage"] + (rng.uniform_int(span) if span > 0 else 0)
    height_roll = rng.roll(node["heightmod"])
    height = node["baseheight"] + height_roll
    weight = node["baseweight"] + height_roll * rng.roll(node["weightmod"])

    result = {
        "Age": f"{age} year" if age == 1 else f"{age} years",
        "Height": f"{height // 12}'{height % 12}\"",
        "Weight": f"{weight} lbs.",
    }
    for name, value in (node.get("_other") or {}).items():
        result[name] = value
    return result


@handles(Opcode.GENDERSORT)
def _gendersort(node, ctx, argument):
    require_fields(node, [Gender.MALE.value, Gender.FEMALE.value], "gendersort")
    gender = ctx.gender
    if gender in (Gender.MALE.value, Gender.FEMALE.value):
        return node[gender]
    return ctx.rng.pick_one([node[Gender.MALE.value], node[Gender.FEMALE.value]])


@handles(Opcode.HALFETHNICITY)
def _halfethnicity(node, ctx, argument):
    ctx.ethnicity = random_ethnicity(ctx) if ctx.rng.uniform_int(5) > 0 else UNKNOWN
    return ctx.ethnicity


@handles(Opcode.HUMANETHNICITY)
def _humanethnicity(node, ctx, argument):
    ctx.ethnicity = random_ethnicity(ctx)
    return ctx.ethnicity


@handles(Opcode.SUBRACESORT)
def _subracesort(node, ctx, argument):
    require_fields(node, ["Subraces and Variants", "Physical Characteristics"], "subracesort")
    property_name = argument.replace("_", " ") if argument else "Subrace"
    subrace = None
    variants = {}
    for name, value in node["Subraces and Variants"].items():
        if name == property_name:
            if isinstance(value, list):
                subrace = ctx.rng.pick_one(value)
            else:
                subrace = book_sort(value, ctx.used_books, ctx.rng)
            variants[name] = subrace
        else:
            variants[name] = value

    characteristics = node["Physical Characteristics"]
    physical = characteristics.get(subrace) if isinstance(subrace, str) else None
    if physical is None:
        log.debug("No physical characteristics for subrace %r", subrace)
    return {
        "Subraces and Variants": variants,
        "Physical Characteristics": physical,
    }


@handles(Opcode.DRAGONBORNVARIANTTYPE)
def _dragonborn_variant(node, ctx, argument):
    variants = _requires_book("EGtW", node, ctx)
    return None if variants is None else ctx.rng.pick_one(variants)


@handles(Opcode.DRAGONMARKVARIANT)
def _dragonmark_variant(node, ctx, argument):
    variants = _requires_book("EBR", node, ctx)
    if variants is None or ctx.rng.uniform_int(2) == 0:
        return None
    return ctx.rng.pick_one(variants)


@handles(Opcode.TIEFLINGAPPEARANCE)
def _tiefling_appearance(node, ctx, argument):
    if ctx.rng.uniform_int(3) == 0:
        return None
    features = require_fields(node, ["_array"], "tieflingappearance")["_array"]
    return ", ".join(ctx.rng.pick_many(features, ctx.rng.roll("1d4") + 1))


@handles(Opcode.TIEFLINGVARIANTTYPE)
def _tiefling_variant(node, ctx, argument):
    variants = _requires_book("SCAG", node, ctx)
    return None if variants is None else ctx.rng.pick_one(variants)


@handles(Opcode.MONSTROUSORIGIN)
def _monstrous_origin(node, ctx, argument):
    origins = require_fields(ctx.corpus.other, ["monstrousOrigins"], "other")["monstrousOrigins"]
    return ctx.rng.pick_one(origins)


@handles(Opcode.BACKGROUNDTRAITS)
def _background_traits(node, ctx, argument):
    source = (argument or "").replace("_", " ")
    require_fields(ctx.corpus.backgrounds, [source], "backgrounds")
    background = require_fields(ctx.corpus.backgrounds[source], ["Trait", "Ideal", "Bond", "Flaw"], source)
    return {key: background[key] for key in ("Trait", "Ideal", "Bond", "Flaw")}


@handles(Opcode.RAVNICACONTACTS)
def _ravnica_contacts(node, ctx, argument):
    require_fields(node, ["_name", "_guild", "_nonguild"], "ravnicacontacts")
    rng = ctx.rng
    guild = node["_name"]
    contacts = {
        f"{guild} Ally": rng.pick_one(node["_guild"]),
        f"{guild} Rival": rng.pick_one(node["_guild"]),
    }
    outsider = rng.pick_one(node["_nonguild"])
    if outsider == "_reroll":
        contacts[f"Additional {guild} Contact"] = rng.pick_one(node["_guild"])
    else:
        contacts[f"Non-{guild} Contact"] = outsider
    return contacts


@handles(Opcode.DIMIRCONTACTS)
def _dimir_contacts(node, ctx, argument):
    require_fields(node, ["_dimircontact", "_guilds"], "dimircontacts")
    rng = ctx.rng
    secondary = require_fields(rng.pick_one(node["_guilds"]), ["name", "background"], "dimircontacts guild")
    require_fields(ctx.corpus.backgrounds, [secondary["background"]], "backgrounds")
    guild_background = ctx.corpus.backgrounds[secondary["background"]]
    other_contacts = require_fields(
        require_fields(guild_background, ["Contacts"], secondary["background"])["Contacts"],
        ["_guild"],
        f"{secondary['background']} Contacts",
    )["_guild"]
    return {
        "Dimir Ally": rng.pick_one(node["_dimircontact"]),
        "Secondary Guild": secondary["name"],
        "Secondary Guild Ally": rng.pick_one(other_contacts),
        "Secondary Guild Rival": rng.pick_one(other_contacts),
    }


_UNHANDLED = set(Opcode) - set(_HANDLERS)
if _UNHANDLED:
    raise RuntimeError(f"Opcodes without handlers: {sorted(op.value for op in _UNHANDLED)}")
