import logging
import re
import secrets
import string
from typing import Callable

from tinylink.errors import Conflict, InvalidInput, ResourceExhausted

logger = logging.getLogger("tinylink")

ALPHABET = string.ascii_letters + string.digits
MIN_LENGTH = 6
MAX_LENGTH = 8
CODE_PATTERN = re.compile(rf"[A-Za-z0-9]{{{MIN_LENGTH},{MAX_LENGTH}}}")
MAX_ATTEMPTS = 10

# top-level routes that fit the code pattern and would shadow a redirect
RESERVED = {"healthz"}


def is_valid_code(code: str) -> bool:
    return isinstance(code, str) and CODE_PATTERN.fullmatch(code) is not None


def generate_code() -> str:
    length = MIN_LENGTH + secrets.randbelow(MAX_LENGTH - MIN_LENGTH + 1)
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def allocate_code(
    exists: Callable[[str], bool],
    custom_code: str | None = None,
    max_attempts: int = MAX_ATTEMPTS,
    generate: Callable[[], str] = generate_code,
) -> str:
    """Pick a code that is not in the store yet.

    ``exists`` is only a pre-check; the unique constraint on insert is what
    actually guarantees uniqueness.
    """
    if custom_code:
        if not is_valid_code(custom_code):
            raise InvalidInput(f"customCode must match [A-Za-z0-9]{{{MIN_LENGTH},{MAX_LENGTH}}}")
        if custom_code in RESERVED or exists(custom_code):
            raise Conflict()
        return custom_code

    for _ in range(max_attempts):
        code = generate()
        if code not in RESERVED and not exists(code):
            return code
    logger.warning("No free code after %d attempts", max_attempts)
    raise ResourceExhausted()
