import re

import pytest

from barx import code128
from barx.code128 import Code128Generator, choose_code_set, generate, pattern_width, validate_data
from barx.errors import InvalidInput

BITS = re.compile(r"^[01]+$")


def test_symbol_table_shape():
    assert len(code128.PATTERNS) == 107
    assert all(len(p) == 11 for p in code128.PATTERNS[:106])
    assert code128.PATTERNS[code128.STOP] == "1100011101011"
    assert len(code128.CODE_SET_A) == 64 and code128.CODE_SET_A[-1] == "_"
    assert len(code128.CODE_SET_B) == 95 and code128.CODE_SET_B[-1] == "~"


def test_even_digit_string_encodes_in_set_c():
    # START C, 12, 34, checksum (105 + 12 + 68) % 103 = 82, STOP
    expected = "11010011100" "10110011100" "10001011000" "10010011110" "1100011101011"
    assert generate("1234") == expected


def test_single_uppercase_encodes_in_set_a():
    # START A, 'A' = 33, checksum (103 + 33) % 103 = 33, STOP
    a = "10100011000"
    assert generate("A") == "11010000100" + a + a + "1100011101011"


@pytest.mark.parametrize("data, code_set", [
    ("1234", "C"),
    ("123456", "C"),
    ("12345", "A"),
    ("12", "A"),
    ("ABC123", "A"),
    ("!@#$%^&*()", "A"),
    ("test123", "B"),
    ("TeSt123", "B"),
    ("12ab", "B"),
])
def test_choose_code_set(data, code_set):
    assert choose_code_set(data) == code_set


def test_checksum_is_weighted_modulo_103():
    values = code128.to_values("test123", "B")
    assert values == [84, 69, 83, 84, 17, 18, 19]
    assert code128.checksum(values, "B") == 1


@pytest.mark.parametrize("data", ["TEST123", "test123", "123456", "12345", "!@#$%^&*()", "A" * 48])
def test_pattern_length_and_alphabet(data):
    pattern = generate(data)
    n_values = len(data) // 2 if choose_code_set(data) == "C" else len(data)
    assert BITS.match(pattern)
    assert len(pattern) == 11 * (2 + n_values) + 13


def test_generate_is_deterministic():
    assert generate("TEST123") == generate("TEST123")


def test_generate_with_all_printable_ascii():
    printable = "".join(chr(c) for c in range(32, 127))[:48]
    assert BITS.match(generate(printable))


def test_generate_rejects_empty():
    with pytest.raises(InvalidInput, match="Data cannot be empty"):
        generate("")


def test_generate_rejects_too_long():
    with pytest.raises(InvalidInput, match=r"Data too long \(max 48 characters\)"):
        generate("A" * 49)


def test_generate_rejects_non_ascii():
    with pytest.raises(InvalidInput, match="non-ASCII"):
        generate("test€123")


def test_generate_rejects_character_outside_subset():
    with pytest.raises(InvalidInput, match="not supported in Code Set A"):
        generate("AB\x01")


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        generate("")


@pytest.mark.parametrize("data", ["123456", "ABC123", "test123", "A" * 48, "0", "!@#$%"])
def test_validate_data_accepts(data):
    assert validate_data(data) is True


@pytest.mark.parametrize("data", ["", "A" * 49, "test€123", "test€", "AB\x01", "\x7f"])
def test_validate_data_rejects(data):
    assert validate_data(data) is False


@pytest.mark.parametrize("data", ["", "0", "A" * 49, "AB\x01", "ok\t", "€", "12345", "x" * 48])
def test_validate_data_agrees_with_generate(data):
    try:
        generate(data)
        succeeded = True
    except InvalidInput:
        succeeded = False
    assert validate_data(data) is succeeded


def test_pattern_width():
    assert pattern_width("110110011001101100110") == 21


def test_generator_object_delegates():
    gen = Code128Generator()
    assert gen.generate("1234") == generate("1234")
    assert gen.validate_data("") is False
    assert gen.pattern_width(gen.generate("1234")) == 57
