"""Code 128 encoder: subset selection, value conversion, modulo-103 checksum and bar pattern assembly."""

from barx.errors import InvalidInput
from barx.logging import audit, get_logger, trace

log = get_logger("code128")

MAX_LENGTH = 48

START_A = 103
START_B = 104
START_C = 105
STOP = 106

START_VALUES = {"A": START_A, "B": START_B, "C": START_C}

# Bar/space modules for code values 0-106; 1 = bar, 0 = space.
# Every symbol is 11 modules wide except STOP (13, includes the final bar).
PATTERNS = (
    "11011001100", "11001101100", "11001100110", "10010011000", "10010001100",  # 0-4
    "10001001100", "10011001000", "10011000100", "10001100100", "11001001000",  # 5-9
    "11001000100", "11000100100", "10110011100", "10011011100", "10011001110",  # 10-14
    "10111001100", "10011101100", "10011100110", "11001110010", "11001011100",  # 15-19
    "11001001110", "11011100100", "11001110100", "11101101110", "11101001100",  # 20-24
    "11100101100", "11100100110", "11101100100", "11100110100", "11100110010",  # 25-29
    "11011011000", "11011000110", "11000110110", "10100011000", "10001011000",  # 30-34
    "10001000110", "10110001000", "10001101000", "10001100010", "11010001000",  # 35-39
    "11000101000", "11000100010", "10110111000", "10110001110", "10001101110",  # 40-44
    "10111011000", "10111000110", "10001110110", "11101110110", "11010001110",  # 45-49
    "11000101110", "11011101000", "11011100010", "11011101110", "11101011000",  # 50-54
    "11101000110", "11100010110", "11101101000", "11101100010", "11100011010",  # 55-59
    "11101111010", "11001000010", "11110001010", "10100110000", "10100001100",  # 60-64
    "10010110000", "10010000110", "10000101100", "10000100110", "10110010000",  # 65-69
    "10110000100", "10011010000", "10011000010", "10000110100", "10000110010",  # 70-74
    "11000010010", "11001010000", "11110111010", "11000010100", "10001111010",  # 75-79
    "10100111100", "10010111100", "10010011110", "10111100100", "10011110100",  # 80-84
    "10011110010", "11110100100", "11110010100", "11110010010", "11011011110",  # 85-89
    "11011110110", "11110110110", "10101111000", "10100011110", "10001011110",  # 90-94
    "10111101000", "10111100010", "11110101000", "11110100010", "10111011110",  # 95-99
    "10111101110", "11101011110", "11110101110", "11010000100", "11010010000",  # 100-104
    "11010011100", "1100011101011",                                             # 105 (START C), 106 (STOP)
)

# Set A: space through underscore (values 0-63)
CODE_SET_A = tuple(chr(c) for c in range(0x20, 0x60))
# Set B: space through tilde (values 0-94)
CODE_SET_B = tuple(chr(c) for c in range(0x20, 0x7F))

_INDEX = {
    "A": {ch: i for i, ch in enumerate(CODE_SET_A)},
    "B": {ch: i for i, ch in enumerate(CODE_SET_B)},
}

_DIGITS = frozenset("0123456789")
_LOWERCASE = frozenset("abcdefghijklmnopqrstuvwxyz")


def _is_ascii(data: str) -> bool:
    return all(ord(ch) <= 127 for ch in data)


def choose_code_set(data: str) -> str:
    """Pick the subset: C for even-length digit runs of 4+, B if any lowercase, else A."""
    if len(data) >= 4 and len(data) % 2 == 0 and all(ch in _DIGITS for ch in data):
        return "C"
    if any(ch in _LOWERCASE for ch in data):
        return "B"
    return "A"


def to_values(data: str, code_set: str) -> list[int]:
    """Convert text to Code 128 values in the given subset.

    Set C consumes the text two digits at a time; sets A and B map each
    character to its position in the subset table.

    Raises:
        InvalidInput: a character is not part of the subset.
    """
    if code_set == "C":
        return [int(data[i:i + 2]) for i in range(0, len(data), 2)]

    index = _INDEX[code_set]
    values = []
    for ch in data:
        value = index.get(ch)
        if value is None:
            raise InvalidInput(f"Character {ch!r} not supported in Code Set {code_set}")
        values.append(value)
    return values


def checksum(values: list[int], code_set: str) -> int:
    """Modulo-103 weighted sum, seeded with the subset's START value."""
    total = START_VALUES[code_set]
    for position, value in enumerate(values, 1):
        total += value * position
    return total % 103


def assemble(values: list[int], code_set: str, check: int) -> str:
    """Concatenate START, data, checksum and STOP symbols into one bit string."""
    symbols = [START_VALUES[code_set], *values, check, STOP]
    return "".join(PATTERNS[v] for v in symbols)


def _check_length(data: str):
    if not data:
        raise InvalidInput("Data cannot be empty")
    if len(data) > MAX_LENGTH:
        raise InvalidInput(f"Data too long (max {MAX_LENGTH} characters)")


@trace
def generate(data: str) -> str:
    """Encode text as a Code 128 bar pattern.

    Args:
        data: 1 to 48 ASCII characters.

    Returns:
        String of '0'/'1' modules: START, data symbols, checksum, STOP.

    Raises:
        InvalidInput: empty, too long, non-ASCII or unsupported characters.
    """
    _check_length(data)
    if not _is_ascii(data):
        raise InvalidInput(
            "Data contains non-ASCII characters. Code 128 only supports ASCII characters (0-127)"
        )

    code_set = choose_code_set(data)
    values = to_values(data, code_set)
    check = checksum(values, code_set)
    pattern = assemble(values, code_set, check)

    audit("code128.generated", logger=log,
          data=data, code_set=code_set, values=len(values),
          checksum=check, modules=len(pattern))
    return pattern


def validate_data(data: str) -> bool:
    """Return True iff generate(data) would succeed."""
    if not data or len(data) > MAX_LENGTH or not _is_ascii(data):
        return False
    try:
        to_values(data, choose_code_set(data))
    except InvalidInput:
        return False
    return True


def pattern_width(pattern: str) -> int:
    """Number of modules in a pattern."""
    return len(pattern)


class Code128Generator:
    """Encoder object for callers that hold one instance and pass it around."""

    def generate(self, data: str) -> str:
        return generate(data)

    def validate_data(self, data: str) -> bool:
        return validate_data(data)

    def pattern_width(self, pattern: str) -> int:
        return pattern_width(pattern)
