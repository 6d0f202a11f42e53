# application/rate_catalog.py
from __future__ import annotations
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Protocol
import logging
import re
import threading
from euvat.core.errors import MalformedResponse, UnknownCountryCode, VATError
from euvat.domain.models import Clock, CountryRateTable, RatePeriod, utc_today

logger = logging.getLogger(__name__)

# Feed używa roku 0000 jako "obowiązuje od zawsze"
PLACEHOLDER_YEAR_PREFIX = "0000-"
ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


class RatesFetcher(Protocol):
    def fetch_raw_rates(self) -> List[Dict]: ...


def parse_effective_from(value: str, country_code: str = "") -> date:
    # strptime przepuszcza "2012-1-1" – wymagamy pełnego YYYY-MM-DD
    if not isinstance(value, str) or not ISO_DATE_RE.fullmatch(value):
        raise MalformedResponse(f"bad effective_from {value!r} for {country_code}")
    if value.startswith(PLACEHOLDER_YEAR_PREFIX):
        # sprawdzamy tylko poprawność MM-DD, sam dzień nie ma znaczenia
        try:
            datetime.strptime("2000-" + value[len(PLACEHOLDER_YEAR_PREFIX):], "%Y-%m-%d")
        except ValueError as e:
            raise MalformedResponse(f"bad effective_from {value!r} for {country_code}") from e
        return date.min
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise MalformedResponse(f"bad effective_from {value!r} for {country_code}") from e


def parse_rate(level: str, value, country_code: str = "") -> Decimal:
    # bool to też int – odrzucamy jawnie
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        raise MalformedResponse(f"rate {level!r} for {country_code} is not a number: {value!r}")
    try:
        rate = Decimal(str(value))
    except InvalidOperation as e:
        raise MalformedResponse(f"rate {level!r} for {country_code} is not a number: {value!r}") from e
    if not rate.is_finite() or rate < 0:
        raise MalformedResponse(f"rate {level!r} for {country_code} is out of range: {value!r}")
    return rate


def build_tables(records: List[Dict], clock: Clock = utc_today) -> Dict[str, CountryRateTable]:
    """
    Surowe rekordy feedu -> {kod kraju: CountryRateTable}. Błąd w dowolnym rekordzie psuje całość.

    Każdy rekord musi mieć klucze country_code i periods; pusta lista periods
    jest dozwolona (kraj bez znanych stawek).
    """
    if not isinstance(records, (list, tuple)):
        raise MalformedResponse(f"rates feed records are not a list: {type(records).__name__}")
    tables: Dict[str, CountryRateTable] = {}
    for rec in records:
        try:
            code = str(rec["country_code"]).upper()
            raw_periods = rec["periods"]
            name = rec.get("name") or code
        except (KeyError, TypeError, AttributeError) as e:
            raise MalformedResponse(f"bad country record: {rec!r}") from e
        if not isinstance(raw_periods, (list, tuple)):
            raise MalformedResponse(f"periods for {code} are not a list: {raw_periods!r}")
        if code in tables:
            raise MalformedResponse(f"duplicate country code in feed: {code}")

        periods: List[RatePeriod] = []
        seen = set()
        for p in raw_periods:
            try:
                raw_from = p["effective_from"]
                raw_rates = p["rates"]
            except (KeyError, TypeError) as e:
                raise MalformedResponse(f"bad period for {code}: {p!r}") from e
            if not isinstance(raw_from, str) or not isinstance(raw_rates, Mapping):
                raise MalformedResponse(f"bad period for {code}: {p!r}")
            effective_from = parse_effective_from(raw_from, code)
            if effective_from in seen:
                logger.warning(
                    "Duplicate effective_from %s for %s; the earlier feed entry wins",
                    effective_from, code,
                )
            seen.add(effective_from)
            rates = {str(level): parse_rate(str(level), v, code) for level, v in raw_rates.items()}
            periods.append(RatePeriod(effective_from=effective_from, rates=rates))

        tables[code] = CountryRateTable(country_code=code, name=str(name), periods=tuple(periods), clock=clock)
    return tables


class _FetchAttempt:
    """Jednorazowa bariera: lider pobiera, pozostali czekają na wynik."""

    def __init__(self) -> None:
        self.done = threading.Event()
        self.error: Optional[BaseException] = None


class RateCatalog:
    """
    Katalog stawek VAT wszystkich krajów, wypełniany leniwie jednym pobraniem z feedu.

    - Pierwsze lookup() wywołuje fetcher dokładnie raz; równoległe wywołania czekają
      na to samo pobranie i widzą ten sam wynik (tabele albo ten sam wyjątek).
    - Błąd pobrania/parsowania nie jest cache'owany – kolejne wywołanie ponawia.
    - Po wypełnieniu katalog nie odświeża się sam; populated_at pozwala ocenić wiek danych.
    """

    def __init__(self, fetcher: RatesFetcher, clock: Clock = utc_today) -> None:
        self._fetcher = fetcher
        self._clock = clock
        self._lock = threading.Lock()
        self._inflight: Optional[_FetchAttempt] = None
        self._by_country_code: Mapping[str, CountryRateTable] = MappingProxyType({})
        self._populated = False
        self._populated_at: Optional[datetime] = None

    @property
    def populated(self) -> bool:
        return self._populated

    @property
    def populated_at(self) -> Optional[datetime]:
        return self._populated_at

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def by_country_code(self) -> Mapping[str, CountryRateTable]:
        self._ensure_populated()
        return self._by_country_code

    def _ensure_populated(self) -> None:
        if self._populated:
            return

        with self._lock:
            if self._populated:
                return
            attempt = self._inflight
            leader = attempt is None
            if leader:
                attempt = self._inflight = _FetchAttempt()

        if not leader:
            attempt.done.wait()
            if attempt.error is not None:
                raise attempt.error
            return

        try:
            self._populate()
        except BaseException as e:
            attempt.error = e
            raise
        finally:
            with self._lock:
                self._inflight = None
            attempt.done.set()

    def _populate(self) -> None:
        logger.info("Fetching VAT rates")
        try:
            records = self._fetcher.fetch_raw_rates()
            tables = build_tables(records, self._clock)
        except VATError as e:
            logger.warning("Fetching VAT rates failed: %s", e)
            raise
        # publikacja: najpierw gotowa mapa, potem flaga
        self._by_country_code = MappingProxyType(tables)
        self._populated_at = datetime.now(timezone.utc)
        self._populated = True
        logger.info("VAT rates loaded for %d countries", len(tables))

    def lookup(self, country_code: str) -> CountryRateTable:
        self._ensure_populated()
        table = self._by_country_code.get(country_code)
        if table is None:
            raise UnknownCountryCode(country_code)
        return table

    def tables(self) -> List[CountryRateTable]:
        self._ensure_populated()
        return [self._by_country_code[code] for code in sorted(self._by_country_code)]
