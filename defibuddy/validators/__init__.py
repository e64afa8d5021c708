"""
Input Validators for DefiBuddy

Custom validation and sanitization functions for security and data integrity.
"""

from .validators import (
    is_wallet_address,
    classify_query,
    validate_eth_address,
    shorten_address,
    sanitize_string,
    validate_person_name,
    validate_buddy_name,
    validate_chat_message,
    validate_symbol,
    validate_symbols,
    validate_contribution,
)

__all__ = [
    'is_wallet_address',
    'classify_query',
    'validate_eth_address',
    'shorten_address',
    'sanitize_string',
    'validate_person_name',
    'validate_buddy_name',
    'validate_chat_message',
    'validate_symbol',
    'validate_symbols',
    'validate_contribution',
]
