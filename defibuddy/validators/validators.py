"""
Input Validators and Sanitizers

Validation and sanitization functions for wallet addresses, person
names, token symbols and buddy contributions.
"""

import re
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List

from ..exceptions import InvalidAddressError

logger = logging.getLogger(__name__)

ETH_ADDRESS_RE = re.compile(r'^0x[a-fA-F0-9]{40}$')

# NUMERIC(12,2)
MAX_CONTRIBUTION = Decimal('9999999999.99')
CENTS = Decimal('0.01')


# ============================================================================
# ADDRESS VALIDATION
# ============================================================================

def is_wallet_address(query: str) -> bool:
    """True when the stripped query is 0x followed by exactly 40 hex characters"""
    if not isinstance(query, str):
        return False
    return ETH_ADDRESS_RE.match(query.strip()) is not None


def classify_query(query: str) -> str:
    """Dispatch rule for the unified lookup: 'wallet' or 'personality'"""
    return "wallet" if is_wallet_address(query) else "personality"


def validate_eth_address(address: str) -> str:
    """
    Validate an Ethereum address

    Returns:
        The stripped address, case preserved

    Raises:
        InvalidAddressError: If the address is not 0x + 40 hex characters
    """
    if not address or not isinstance(address, str):
        raise InvalidAddressError(
            address=str(address) if address else "empty",
            reason="Wallet address is required"
        )

    address = address.strip()
    if not ETH_ADDRESS_RE.match(address):
        raise InvalidAddressError(
            address=address,
            reason="Expected 0x followed by 40 hexadecimal characters"
        )

    return address


def shorten_address(address: str) -> str:
    """0x1234567890abcdef... -> 0x1234...cdef"""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


# ============================================================================
# STRING VALIDATION & SANITIZATION
# ============================================================================

def sanitize_string(
    value: str,
    max_length: int = 255,
    allow_newlines: bool = False,
    strip_html: bool = True
) -> str:
    """
    Sanitize string input

    Args:
        value: String to sanitize
        max_length: Maximum allowed length
        allow_newlines: Whether to allow newline characters
        strip_html: Whether to strip HTML tags

    Returns:
        Sanitized string

    Raises:
        ValueError: If string is invalid
    """
    if not isinstance(value, str):
        raise ValueError("Value must be a string")

    value = value.strip()

    if len(value) > max_length:
        raise ValueError(f"String cannot exceed {max_length} characters")

    if not allow_newlines:
        value = value.replace('\n', ' ').replace('\r', ' ')

    if strip_html:
        value = re.sub(r'<[^>]+>', '', value)

    # Null bytes break some database drivers
    value = value.replace('\x00', '')

    return value.strip()


def validate_person_name(name: str) -> str:
    """
    Validate a public figure name for personality lookup

    Raises:
        ValueError: If name is empty after sanitizing or too long
    """
    if not name or not isinstance(name, str):
        raise ValueError("Person name is required")

    name = sanitize_string(name, max_length=200)
    if not name:
        raise ValueError("Person name cannot be empty")

    return name


def validate_buddy_name(name: str) -> str:
    if not name or not isinstance(name, str):
        raise ValueError("Buddy name is required")

    name = sanitize_string(name, max_length=100)
    if not name:
        raise ValueError("Buddy name cannot be empty")

    return name


def validate_chat_message(message: str) -> str:
    if not message or not isinstance(message, str):
        raise ValueError("Message is required")

    message = sanitize_string(message, max_length=2000, allow_newlines=True, strip_html=False)
    if not message:
        raise ValueError("Message cannot be empty")

    return message


# ============================================================================
# TOKEN SYMBOLS
# ============================================================================

def validate_symbol(symbol: str) -> str:
    """
    Validate a token symbol

    Valid formats: letters, digits, dots, hyphens, underscores and '+',
    up to 20 characters (e.g. ETH, USDC.e, WBTC, 1INCH)
    """
    if not symbol or not isinstance(symbol, str):
        raise ValueError("Token symbol is required")

    symbol = symbol.strip()
    if len(symbol) > 20:
        raise ValueError("Token symbol must be at most 20 characters")

    if not re.match(r'^[A-Za-z0-9._+\-]+$', symbol):
        raise ValueError(f"Invalid token symbol: {symbol}")

    return symbol


def validate_symbols(symbols: List[str], max_count: int = 50) -> List[str]:
    if not isinstance(symbols, list):
        raise ValueError("Symbols must be a list")

    if len(symbols) > max_count:
        raise ValueError(f"At most {max_count} symbols per request")

    return [validate_symbol(s) for s in symbols]


# ============================================================================
# FINANCIAL DATA VALIDATION
# ============================================================================

def validate_contribution(amount) -> Decimal:
    """
    Validate a buddy contribution

    Returns:
        Amount quantized to cents (half-up)

    Raises:
        ValueError: If amount is not a non-negative number that fits NUMERIC(12,2)
    """
    if isinstance(amount, bool):
        raise ValueError("Contribution must be a valid number")

    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError("Contribution must be a valid number")

    if not value.is_finite():
        raise ValueError("Contribution must be a finite number")

    if value < 0:
        raise ValueError("Contribution cannot be negative")

    value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    if value > MAX_CONTRIBUTION:
        raise ValueError("Contribution value is too large")

    return value
