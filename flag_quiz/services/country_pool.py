import logging
import random
from typing import List, Optional, Sequence, Set
from ..errors import EmptyPoolError, InsufficientPoolError
from ..models import Country

logger = logging.getLogger("flag_quiz")

class CountryPool:
    """Candidate countries plus the codes already drawn into a session.

    The used-set outlives individual sessions and is only cleared by reset().
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self.countries: List[Country] = []
        self.used_codes: Set[str] = set()

    @property
    def is_loaded(self) -> bool:
        return bool(self.countries)

    @property
    def size(self) -> int:
        return len(self.countries)

    @property
    def remaining(self) -> int:
        return len(self._unused())

    def load(self, countries: Sequence[Country]) -> None:
        if not countries:
            raise EmptyPoolError("no countries to load")
        self.countries = list(countries)
        logger.debug({"event": "pool_loaded", "size": self.size, "used": len(self.used_codes)})

    def names(self) -> List[str]:
        return [c.name for c in self.countries]

    def sample_without_replacement(self, n: int) -> List[Country]:
        if not self.countries:
            raise EmptyPoolError("country pool has not been loaded")
        unused = self._unused()
        if n > len(unused):
            raise InsufficientPoolError(n, len(unused))
        # random.sample already returns the picks in random order
        drawn = self.rng.sample(unused, n)
        self.used_codes.update(c.code for c in drawn)
        logger.debug({"event": "pool_sampled", "count": n, "remaining": len(unused) - n})
        return drawn

    def reset(self) -> None:
        self.used_codes.clear()
        logger.debug({"event": "pool_reset", "size": self.size})

    def _unused(self) -> List[Country]:
        return [c for c in self.countries if c.code not in self.used_codes]
