"""Error taxonomy for the character generation engine.

Every error is deterministic given bad input; none of them is retryable.
The engine raises them and lets callers decide what to show.
"""

from typing import Iterable, Optional


class GenerationError(ValueError):
    """Base class for every engine error."""

    code = "generation_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EmptyInputError(GenerationError):
    code = "empty_input"


class InfeasibleCountError(GenerationError):
    code = "infeasible_count"


class InvalidDiceSpecError(GenerationError):
    code = "invalid_dice_spec"


class NoEligibleEntryError(GenerationError):
    code = "no_eligible_entry"


class MissingCorpusFieldError(GenerationError):
    code = "missing_corpus_field"

    def __init__(self, where: str, fields: Iterable[str]):
        missing = list(fields)
        super().__init__(f"{where} missing fields: {missing}", {"where": where, "fields": missing})
        self.where = where
        self.fields = missing


class MissingCharacterFieldError(GenerationError):
    code = "missing_character_field"

    def __init__(self, stage: str, fields: Iterable[str]):
        missing = list(fields)
        super().__init__(
            f"{stage} needs {', '.join(missing)} to be generated first",
            {"stage": stage, "fields": missing},
        )
        self.stage = stage
        self.fields = missing
