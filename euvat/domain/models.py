# domain/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from euvat.core.errors import NoActivePeriod, UnknownRateLevel

Clock = Callable[[], date]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _as_day(value: date) -> date:
    # datetime dziedziczy po date – obcinamy do samej daty
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class RatePeriod:
    effective_from: date
    rates: Mapping[str, Decimal]

    # rates to MappingProxyType – typ świadomie niehaszowalny
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))


@dataclass(frozen=True)
class CountryRateTable:
    """
    Stawki VAT jednego kraju jako zbiór okresów (kolejność bez znaczenia).

    Stawka na dzień T pochodzi z okresu o najpóźniejszym effective_from <= T.
    Przy zduplikowanym effective_from wygrywa okres występujący wcześniej
    w `periods` (kolejność z feedu).
    """

    country_code: str
    name: str
    periods: Tuple[RatePeriod, ...] = ()
    clock: Clock = field(default=utc_today, compare=False, repr=False)

    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "periods", tuple(self.periods))

    def active_period(self, as_of: date) -> RatePeriod:
        day = _as_day(as_of)
        active: Optional[RatePeriod] = None
        for period in self.periods:
            if period.effective_from > day:
                continue
            if active is None or period.effective_from > active.effective_from:
                active = period
        if active is None:
            raise NoActivePeriod(self.country_code, day)
        return active

    def rate_on(self, as_of: date, level: str) -> Decimal:
        period = self.active_period(as_of)
        try:
            return period.rates[level]
        except KeyError:
            raise UnknownRateLevel(level, self.country_code) from None

    def rate(self, level: str) -> Decimal:
        """Stawka obowiązująca dziś (wg wstrzykniętego zegara)."""
        return self.rate_on(self.clock(), level)


@dataclass(frozen=True)
class ViesResponse:
    country_code: str
    vat_number: str
    request_date: str  # np. 2015-03-06+01:00
    valid: bool
    name: Optional[str] = None
    address: Optional[str] = None
