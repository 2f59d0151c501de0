"""Brazilian CPF (national identity number) validation."""

import re

_NON_DIGITS = re.compile(r"\D")


def normalize_cpf(cpf: str) -> str:
    """Strip punctuation, keeping only digits (``123.456.789-09`` -> ``12345678909``)."""
    return _NON_DIGITS.sub("", cpf or "")


def _check_digit(digits: list[int], first_weight: int) -> int:
    total = sum(d * w for d, w in zip(digits, range(first_weight, 1, -1)))
    remainder = 11 - (total % 11)
    return 0 if remainder >= 10 else remainder


def is_valid_cpf(cpf: str) -> bool:
    """Validate a CPF with the two mod-11 check digits.

    Formatted and bare inputs are both accepted. Sequences of one repeated
    digit (``111.111.111-11``) pass the arithmetic but are never issued, so
    they are rejected.
    """
    number = normalize_cpf(cpf)
    if len(number) != 11 or number == number[0] * 11:
        return False

    digits = [int(c) for c in number]
    if _check_digit(digits[:9], 10) != digits[9]:
        return False
    return _check_digit(digits[:10], 11) == digits[10]


def format_cpf(cpf: str) -> str:
    """Format 11 digits as ``XXX.XXX.XXX-XX``."""
    number = normalize_cpf(cpf)
    return f"{number[:3]}.{number[3:6]}.{number[6:9]}-{number[9:]}"
