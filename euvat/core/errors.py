# core/errors.py
from __future__ import annotations


class VATError(Exception):
    """Bazowy wyjątek pakietu."""


class ServiceUnavailable(VATError):
    """Feed stawek lub VIES nieosiągalny (transport, status HTTP, timeout)."""


class MalformedResponse(VATError):
    """Odpowiedź serwisu nie daje się zinterpretować."""


class InvalidVATNumber(VATError):
    """VIES odrzucił numer (INVALID_INPUT) albo numer jest za krótki."""


class UnknownCountryCode(VATError, LookupError):
    """Brak danych dla kraju po udanym pobraniu stawek."""

    def __init__(self, country_code: str) -> None:
        super().__init__(f"unknown country code: {country_code!r}")
        self.country_code = country_code


class UnknownRateLevel(VATError, LookupError):
    """Aktywny okres nie ma stawki o podanej nazwie."""

    def __init__(self, level: str, country_code: str = "") -> None:
        where = f" for {country_code}" if country_code else ""
        super().__init__(f"unknown rate level{where}: {level!r}")
        self.level = level
        self.country_code = country_code


class NoActivePeriod(VATError, LookupError):
    """Żaden okres nie obowiązuje w podanym dniu."""

    def __init__(self, country_code: str, as_of) -> None:
        super().__init__(f"no rate period in effect for {country_code or '?'} on {as_of}")
        self.country_code = country_code
        self.as_of = as_of
