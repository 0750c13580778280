from services.exceptions import InvalidCharacterError

BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
BASE = len(BASE62_ALPHABET)
ZERO_CHAR = BASE62_ALPHABET[0]

_INDEX = {char: value for value, char in enumerate(BASE62_ALPHABET)}


def encode_base62(number: int) -> str:
    """Encode a non-negative integer, most significant digit first."""
    if number < 0:
        raise ValueError("Cannot encode a negative number")
    if number == 0:
        return ZERO_CHAR

    digits: list[str] = []
    while number > 0:
        number, remainder = divmod(number, BASE)
        digits.append(BASE62_ALPHABET[remainder])
    return "".join(reversed(digits))


def decode_base62(encoded: str) -> int:
    """Inverse of encode_base62. Leading zero characters are accepted."""
    result = 0
    for char in encoded:
        value = _INDEX.get(char)
        if value is None:
            raise InvalidCharacterError(char)
        result = result * BASE + value
    return result


def encode_base62_min_length(number: int, min_length: int) -> str:
    # Left padding with the zero character keeps the decoded value unchanged.
    return encode_base62(number).rjust(min_length, ZERO_CHAR)


def is_valid_base62(value: str | None) -> bool:
    if not value:
        return False
    return all(char in _INDEX for char in value)
