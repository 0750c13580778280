import pytest

from services.exceptions import InvalidCharacterError
from utils.encoder import (
    BASE62_ALPHABET,
    decode_base62,
    encode_base62,
    encode_base62_min_length,
    is_valid_base62,
)

SAMPLE_NUMBERS = [0, 1, 9, 10, 35, 36, 61, 62, 63, 3843, 3844, 123456789, 2**62, 2**63 - 1, 2**80]


def test_alphabet_order():
    assert len(BASE62_ALPHABET) == 62
    assert BASE62_ALPHABET[0] == "0"
    assert BASE62_ALPHABET[10] == "a"
    assert BASE62_ALPHABET[36] == "A"
    assert BASE62_ALPHABET[61] == "Z"


@pytest.mark.parametrize("number,expected", [(0, "0"), (9, "9"), (10, "a"), (61, "Z"), (62, "10"), (3844, "100")])
def test_encode_known_values(number, expected):
    assert encode_base62(number) == expected


@pytest.mark.parametrize("number", SAMPLE_NUMBERS)
def test_decode_inverts_encode(number):
    assert decode_base62(encode_base62(number)) == number


def test_encode_rejects_negative():
    with pytest.raises(ValueError):
        encode_base62(-1)


def test_longest_63_bit_value_has_eleven_characters():
    assert len(encode_base62(2**63 - 1)) == 11


def test_decode_accepts_leading_zero_characters():
    assert decode_base62("0010") == 62
    assert encode_base62(decode_base62("0010")) == "10"


@pytest.mark.parametrize("encoded", ["abc-", "a b", "héllo", "12_3"])
def test_decode_rejects_characters_outside_alphabet(encoded):
    with pytest.raises(InvalidCharacterError):
        decode_base62(encoded)


def test_invalid_character_is_a_value_error():
    with pytest.raises(ValueError, match="Invalid character"):
        decode_base62("!")


@pytest.mark.parametrize("number", [0, 5, 61, 62, 916132831, 2**63 - 1])
@pytest.mark.parametrize("min_length", [-3, 0, 1, 6, 12])
def test_min_length_padding_keeps_value(number, min_length):
    padded = encode_base62_min_length(number, min_length)
    assert len(padded) >= max(min_length, len(encode_base62(number)))
    assert decode_base62(padded) == number


def test_min_length_pads_with_zero_character():
    assert encode_base62_min_length(5, 6) == "000005"
    assert encode_base62_min_length(62, 4) == "0010"


def test_non_positive_min_length_is_plain_encoding():
    assert encode_base62_min_length(62, 0) == "10"
    assert encode_base62_min_length(62, -5) == "10"


@pytest.mark.parametrize("value", ["", None, "abc-", "promo!", "with space", "ÿ"])
def test_is_valid_rejects(value):
    assert not is_valid_base62(value)


@pytest.mark.parametrize("value", ["0", "Z", "aZ09", BASE62_ALPHABET])
def test_is_valid_accepts(value):
    assert is_valid_base62(value)
