"""
RECORD ID & DOCUMENT NUMBER GENERATOR

Purpose:
- Opaque, unique record ids (store keys)
- Human document numbers printed on LRs, challans and invoices

Document number format:
PREFIX-YYYY-NNN

Where:
- PREFIX: LR, CH or INV
- YYYY: Document year
- NNN: Zero-padded sequence (at least 3 digits) within prefix and year
"""

import uuid
from typing import Iterable, Optional, Tuple

LR_PREFIX = "LR"
CHALLAN_PREFIX = "CH"
INVOICE_PREFIX = "INV"


def generate_entity_id() -> str:
    """
    Generate an opaque, globally unique record id.

    Examples:
        >>> a = generate_entity_id()
        >>> b = generate_entity_id()
        >>> a != b
        True
    """
    return uuid.uuid4().hex


def format_document_number(prefix: str, year: int, sequence: int) -> str:
    """
    Examples:
        >>> format_document_number("LR", 2024, 4)
        'LR-2024-004'
        >>> format_document_number("INV", 2024, 1200)
        'INV-2024-1200'
    """
    return f"{prefix}-{year}-{sequence:03d}"


def parse_document_number(number: str) -> Optional[Tuple[str, int, int]]:
    """
    Split a document number into (prefix, year, sequence).

    Returns None when the value is not a valid document number.

    Examples:
        >>> parse_document_number("CH-2024-002")
        ('CH', 2024, 2)
        >>> parse_document_number("INVALID") is None
        True
    """
    if not number or not isinstance(number, str):
        return None

    parts = number.split("-")

    # Must have 3 parts: prefix, year, sequence
    if len(parts) != 3:
        return None

    prefix, year_part, sequence_part = parts

    if not prefix.isalpha():
        return None

    if not year_part.isdigit() or len(year_part) != 4:
        return None

    if not sequence_part.isdigit() or len(sequence_part) < 3:
        return None

    return prefix, int(year_part), int(sequence_part)


def next_document_number(prefix: str, year: int, existing: Iterable[Optional[str]]) -> str:
    """
    Next free number for ``prefix`` and ``year`` given the numbers in use.

    Examples:
        >>> next_document_number("LR", 2024, ["LR-2024-001", "LR-2024-003"])
        'LR-2024-004'
        >>> next_document_number("LR", 2024, [])
        'LR-2024-001'
    """
    highest = 0
    for number in existing:
        parsed = parse_document_number(number)
        if parsed and parsed[0] == prefix and parsed[1] == year:
            highest = max(highest, parsed[2])

    return format_document_number(prefix, year, highest + 1)
