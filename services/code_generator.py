import logging
import random
from typing import AsyncIterator

from services.exceptions import AliasConflictError
from services.store import MappingStore
from utils.encoder import encode_base62_min_length

logger = logging.getLogger(__name__)

MAX_GENERATION_ATTEMPTS = 5
DEFAULT_CODE_LENGTH = 6

_SIGNED_64_OFFSET = 1 << 63
_MAX_63_BIT = (1 << 63) - 1


class CodeGenerator:
    """Produces short codes for new mappings.

    Random codes come from an injected ``random.Random``; the default is a
    ``random.SystemRandom``, which is safe to share between concurrent callers.
    Tests pass a seeded ``random.Random`` instead.
    """

    def __init__(
        self,
        length: int = DEFAULT_CODE_LENGTH,
        rng: random.Random | None = None,
        max_attempts: int = MAX_GENERATION_ATTEMPTS,
    ):
        self.length = length
        self.rng = rng or random.SystemRandom()
        self.max_attempts = max_attempts

    def draw(self) -> int:
        """Absolute value of a signed 64-bit draw, kept inside 63 bits."""
        signed = self.rng.getrandbits(64) - _SIGNED_64_OFFSET
        # abs(-2**63) does not fit in 63 bits; the mask folds it to 0.
        return abs(signed) & _MAX_63_BIT

    def next_candidate(self) -> str:
        code = encode_base62_min_length(self.draw(), self.length)
        # Keeps the leading characters; distinct draws may share a prefix.
        if len(code) > self.length:
            code = code[: self.length]
        return code

    async def candidates(self, store: MappingStore) -> AsyncIterator[str]:
        """Yield codes that were free when checked, within the attempt budget.

        Every yielded code uses up one attempt, so a caller that hits a
        DuplicateKeyError while saving simply asks for the next one. The
        iteration ends once the budget is spent.
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.next_candidate()
            if await store.exists_by_code(code):
                logger.debug("Short code collision on attempt %d: %s", attempt, code)
                continue
            logger.debug("Generated short code %s after %d attempt(s)", code, attempt)
            yield code

    async def claim_alias(self, store: MappingStore, custom_code: str) -> str:
        """Validate a trimmed custom alias; it is used verbatim, no length rules."""
        alias = custom_code.strip()
        if await store.exists_by_code(alias):
            logger.warning("Custom short code already exists: %s", alias)
            raise AliasConflictError(alias)
        return alias
