from .amounts import format_token_amount, is_empty_amount, to_base_units, to_decimal

__all__ = [
    "format_token_amount",
    "is_empty_amount",
    "to_base_units",
    "to_decimal",
]
