"""Human ethnicity draws shared by race resolution and naming."""

import logging
from typing import List, Optional

from character_creation.context import EthnicityMode, GenerationContext
from character_creation.validators import require_path

log = logging.getLogger(__name__)

UNKNOWN = "Unknown"
ETHNICITY_PATH = ("Human", "Subraces and Variants", "Ethnicity")


def ethnicity_pool(ctx: GenerationContext) -> List[str]:
    """Ethnicities the context's mode may draw from, given its books."""
    pools = require_path(ctx.corpus.races, ETHNICITY_PATH, "races")
    if ctx.ethnicity_mode is EthnicityMode.REAL:
        return list(require_path(pools, ("Real",), "Human ethnicities"))
    pool = list(require_path(pools, ("PHB",), "Human ethnicities"))
    if "SCAG" in ctx.used_books:
        pool += pools.get("SCAG", [])
    return pool


def fits_mode(ethnicity: Optional[str], ctx: GenerationContext) -> bool:
    """True when names for ``ethnicity`` exist under the context's mode."""
    if not ethnicity:
        return False
    pools = require_path(ctx.corpus.races, ETHNICITY_PATH, "races")
    if ctx.ethnicity_mode is EthnicityMode.REAL:
        return ethnicity in pools.get("Real", [])
    return ethnicity in pools.get("PHB", []) or ethnicity in pools.get("SCAG", [])


def random_ethnicity(ctx: GenerationContext) -> str:
    return ctx.rng.pick_one(ethnicity_pool(ctx))


def character_ethnicity(ctx: GenerationContext) -> str:
    """The ethnicity chosen for this character, or a fresh one when none is known."""
    if ctx.ethnicity and ctx.ethnicity != UNKNOWN:
        return ctx.ethnicity
    return random_ethnicity(ctx)
