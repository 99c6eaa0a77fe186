"""
Request validation for wallet analysis.

Addresses are checked before any upstream call is made: base58 alphabet
(no 0, O, I or l) and 32 to 44 characters.
"""

import re
from typing import Any

from .errors import ValidationError


SOLANA_ADDRESS_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def validate_wallet_address(value: Any) -> str:
    """
    Validate and normalize a Solana wallet address.

    Args:
        value: Raw value from the request body

    Returns:
        The stripped address

    Raises:
        ValidationError: If the address is missing or malformed
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Wallet address is required")

    if not isinstance(value, str):
        raise ValidationError("Invalid Solana wallet address format")

    address = value.strip()
    if not SOLANA_ADDRESS_PATTERN.match(address):
        raise ValidationError("Invalid Solana wallet address format")

    return address


def is_valid_wallet_address(value: Any) -> bool:
    try:
        validate_wallet_address(value)
    except ValidationError:
        return False
    return True
