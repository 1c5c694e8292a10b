"""Registration field validators (pure functions)."""

import re

BANK_ACCOUNT_PATTERN = re.compile(r"^[0-9-]{3,}$")


def is_valid_cpf(cpf: str | None) -> bool:
    """Check a Brazilian CPF number, with or without punctuation."""
    if not cpf:
        return False
    digits = re.sub(r"\D", "", cpf)
    if len(digits) != 11 or digits == digits[0] * 11:
        return False

    numbers = [int(d) for d in digits]
    for position in (9, 10):
        total = sum(n * weight for n, weight in zip(numbers[:position], range(position + 1, 1, -1)))
        remainder = total % 11
        check = 0 if remainder < 2 else 11 - remainder
        if numbers[position] != check:
            return False
    return True


def normalize_phone(phone: str | None) -> str:
    """Strip punctuation; area code plus 8 or 9 digits. Empty input stays empty."""
    if not phone or not phone.strip():
        return ""
    digits = re.sub(r"\D", "", phone)
    if not 10 <= len(digits) <= 11:
        raise ValueError("Phone must have an area code and 8 or 9 digits")
    return digits


def is_valid_bank_account(account: str | None) -> bool:
    return bool(account) and BANK_ACCOUNT_PATTERN.match(account) is not None
