import logging
import random
import re
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar, Union

from character_creation.errors import EmptyInputError, InfeasibleCountError, InvalidDiceSpecError

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 1000

_DICE_RE = re.compile(r"^\s*(\d+)\s*[dD]\s*(\d+)\s*$")
_CONSTANT_RE = re.compile(r"^\s*(-?\d+)\s*$")


class Randomizer:
    """Randomness provider for every generation step.

    All draws go through ``uniform_int`` and ``uniform_real`` so a test double
    only has to replace those two.
    """

    def __init__(self, seed: Optional[int] = None, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        self._random = random.Random(seed)
        self.max_attempts = max_attempts

    def uniform_int(self, maximum: int) -> int:
        """Integer in [0, maximum)."""
        if maximum <= 0:
            raise EmptyInputError(f"Cannot draw from an empty range (max={maximum})")
        return self._random.randrange(int(maximum))

    def uniform_real(self, maximum: float) -> float:
        """Real number in [0, maximum)."""
        if maximum <= 0:
            raise EmptyInputError(f"Cannot draw from an empty range (max={maximum})")
        return self._random.random() * maximum

    def pick_one(self, options: Sequence[T]) -> T:
        if not options:
            raise EmptyInputError("Cannot pick from an empty pool")
        return options[self.uniform_int(len(options))]

    def pick_many(self, options: Sequence[T], count: int) -> List[T]:
        """``count`` distinct values (by equality), in draw order."""
        if not options:
            raise EmptyInputError("Cannot pick from an empty pool")
        distinct: List[T] = []
        for value in options:
            if value not in distinct:
                distinct.append(value)
        if count > len(distinct):
            raise InfeasibleCountError(
                f"Requested {count} distinct values from a pool of {len(distinct)}",
                {"requested": count, "available": len(distinct)},
            )
        return self.draw_distinct(lambda: self.pick_one(options), count)

    def draw_distinct(self, draw: Callable[[], T], count: int) -> List[T]:
        picked: List[T] = []
        attempts = 0
        while len(picked) < count:
            attempts += 1
            if attempts > self.max_attempts:
                log.debug("Gave up after %s draws with %s/%s distinct values", attempts - 1, len(picked), count)
                raise InfeasibleCountError(
                    f"Could not draw {count} distinct values in {self.max_attempts} attempts",
                    {"requested": count, "drawn": len(picked)},
                )
            value = draw()
            if value not in picked:
                picked.append(value)
        return picked

    def draw_until(self, draw: Callable[[], T], accept: Callable[[T], bool]) -> T:
        """Redraw until ``accept`` holds, failing once the retry cap is hit."""
        for _ in range(self.max_attempts):
            value = draw()
            if accept(value):
                return value
        raise InfeasibleCountError(
            f"No acceptable value in {self.max_attempts} attempts",
            {"attempts": self.max_attempts},
        )

    def roll(self, spec: Union[str, int]) -> int:
        """Evaluate dice notation: ``NdM`` sums N draws on [1, M]; ``N`` is the constant N."""
        if isinstance(spec, bool):
            raise InvalidDiceSpecError(f"Invalid dice spec: {spec!r}")
        if isinstance(spec, int):
            return spec
        if not isinstance(spec, str):
            raise InvalidDiceSpecError(f"Invalid dice spec: {spec!r}")
        constant = _CONSTANT_RE.match(spec)
        if constant:
            return int(constant.group(1))
        match = _DICE_RE.match(spec)
        if not match:
            raise InvalidDiceSpecError(f"Invalid dice spec: {spec!r}")
        count, sides = int(match.group(1)), int(match.group(2))
        if sides < 1:
            raise InvalidDiceSpecError(f"Dice need at least one side: {spec!r}")
        return sum(self.uniform_int(sides) + 1 for _ in range(count))


class ScriptedRandomizer(Randomizer):
    """Deterministic stand-in that replays a fixed list of raw draws.

    Each draw consumes the next raw value and maps it into range, the same
    way a die face is mapped from a pre-rolled entropy value.
    """

    def __init__(self, values: Iterable[int], max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        super().__init__(seed=0, max_attempts=max_attempts)
        self.values = list(values)
        self.current = 0

    def next_value(self) -> int:
        if self.current >= len(self.values):
            raise IndexError(f"Scripted draw {self.current + 1} not available")
        value = self.values[self.current]
        self.current += 1
        return value

    def uniform_int(self, maximum: int) -> int:
        if maximum <= 0:
            raise EmptyInputError(f"Cannot draw from an empty range (max={maximum})")
        return self.next_value() % int(maximum)

    def uniform_real(self, maximum: float) -> float:
        if maximum <= 0:
            raise EmptyInputError(f"Cannot draw from an empty range (max={maximum})")
        return float(self.next_value()) % maximum

    @property
    def remaining(self) -> int:
        return len(self.values) - self.current
