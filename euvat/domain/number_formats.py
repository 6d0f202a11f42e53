# domain/number_formats.py
from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

# Prefiks kraju (kod VIES, np. EL dla Grecji) -> wzorzec części krajowej numeru
NUMBER_PATTERNS: Dict[str, str] = {
    "AT": r"U[A-Z0-9]{8}",
    "BE": r"(0[0-9]{9}|[0-9]{10})",
    "BG": r"[0-9]{9,10}",
    "CH": r"(?:E(?:-| )[0-9]{3}(?:\.| )[0-9]{3}(?:\.| )[0-9]{3}( MWST)?|E[0-9]{9}(?:MWST)?)",
    "CY": r"[0-9]{8}[A-Z]",
    "CZ": r"[0-9]{8,10}",
    "DE": r"[0-9]{9}",
    "DK": r"[0-9]{8}",
    "EE": r"[0-9]{9}",
    "EL": r"[0-9]{9}",
    "ES": r"[A-Z][0-9]{7}[A-Z]|[0-9]{8}[A-Z]|[A-Z][0-9]{8}",
    "FI": r"[0-9]{8}",
    "FR": r"([A-Z]{2}|[0-9]{2})[0-9]{9}",
    "GB": r"[0-9]{9}|[0-9]{12}|(GD|HA)[0-9]{3}",
    "HR": r"[0-9]{11}",
    "HU": r"[0-9]{8}",
    "IE": r"[A-Z0-9]{7}[A-Z]|[A-Z0-9]{7}[A-W][A-I]",
    "IT": r"[0-9]{11}",
    "LT": r"([0-9]{9}|[0-9]{12})",
    "LU": r"[0-9]{8}",
    "LV": r"[0-9]{11}",
    "MT": r"[0-9]{8}",
    "NL": r"[0-9]{9}B[0-9]{2}",
    "PL": r"[0-9]{10}",
    "PT": r"[0-9]{9}",
    "RO": r"[0-9]{2,10}",
    "SE": r"[0-9]{12}",
    "SI": r"[0-9]{8}",
    "SK": r"[0-9]{10}",
    # Irlandia Północna (VIES po Brexicie) – format jak GB
    "XI": r"[0-9]{9}|[0-9]{12}|(GD|HA)[0-9]{3}",
}

_COMPILED = {code: re.compile(pattern) for code, pattern in NUMBER_PATTERNS.items()}


def normalize_number(number: Optional[str]) -> str:
    return (number or "").strip().upper()


def split_number(number: str) -> Tuple[str, str]:
    """Rozbija numer na (prefiks kraju, część krajowa)."""
    n = normalize_number(number)
    return n[:2], n[2:]


def validate_number_format(number: Optional[str]) -> bool:
    """Sprawdza format numeru VAT wg wzorca kraju; cały numer musi pasować."""
    n = normalize_number(number)
    if len(n) < 3:
        return False
    country_code, national = split_number(n)
    pattern = _COMPILED.get(country_code)
    if pattern is None:
        return False
    return pattern.fullmatch(national) is not None
