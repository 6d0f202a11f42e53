# integration/rates_feed_adapter.py
from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging
import requests
from euvat.core.config import Config
from euvat.core.errors import MalformedResponse, ServiceUnavailable

logger = logging.getLogger(__name__)

# Nazwy krajów dla feedu ibericode (tam są same kody)
COUNTRY_NAMES = {
    "AT": "Austria",
    "BE": "Belgium",
    "BG": "Bulgaria",
    "CY": "Cyprus",
    "CZ": "Czech Republic",
    "DE": "Germany",
    "DK": "Denmark",
    "EE": "Estonia",
    "EL": "Greece",
    "ES": "Spain",
    "FI": "Finland",
    "FR": "France",
    "GB": "United Kingdom",
    "HR": "Croatia",
    "HU": "Hungary",
    "IE": "Ireland",
    "IT": "Italy",
    "LT": "Lithuania",
    "LU": "Luxembourg",
    "LV": "Latvia",
    "MT": "Malta",
    "NL": "Netherlands",
    "PL": "Poland",
    "PT": "Portugal",
    "RO": "Romania",
    "SE": "Sweden",
    "SI": "Slovenia",
    "SK": "Slovakia",
}


class RatesFeedAdapter:
    """
    Adapter feedu stawek VAT (JSON). Obsługiwane kształty odpowiedzi:
      (A) ibericode/vat-rates:
          {"details": ..., "version": ..., "items": {"NL": [{"effective_from": "...", "rates": {...}}]}}
      (B) jsonvat.com:
          {"details": ..., "version": "...", "rates": [{"name", "code", "country_code", "periods": [...]}]}
      (C) sama lista rekordów krajów albo pojedynczy rekord {"country_code", "periods"}.
    Wynik zawsze w jednej postaci:
      [{"name": str, "country_code": str, "periods": [{"effective_from": "YYYY-MM-DD", "rates": {...}}]}]
    Daty zostają stringami – parsuje je katalog.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.s = session or requests.Session()
        self.url = url or Config.RATES_FEED_URL
        self.timeout = Config.SERVICE_TIMEOUT if timeout is None else timeout

    # ---------------- HTTP ----------------

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json", "User-Agent": Config.HTTP_USER_AGENT}

    def _get_json(self) -> Any:
        logger.debug("GET %s (timeout=%ss)", self.url, self.timeout)
        try:
            r = self.s.get(self.url, headers=self._headers(), timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Rates feed unreachable at %s: %s", self.url, e)
            raise ServiceUnavailable(f"rates feed unreachable: {e}") from e
        try:
            return r.json(parse_float=Decimal)
        except ValueError as e:
            raise MalformedResponse(f"rates feed is not valid JSON: {e}") from e

    # -------------- Shapes -------------

    @staticmethod
    def _periods(raw: Any, code: str) -> List[Dict]:
        if not isinstance(raw, list):
            raise MalformedResponse(f"periods for {code} are not a list")
        periods: List[Dict] = []
        for p in raw:
            if not isinstance(p, dict):
                raise MalformedResponse(f"period entry for {code} is not an object")
            effective_from = p.get("effective_from")
            rates = p.get("rates")
            if not isinstance(effective_from, str) or not isinstance(rates, dict):
                raise MalformedResponse(f"period for {code} lacks effective_from/rates")
            periods.append({"effective_from": effective_from, "rates": dict(rates)})
        return periods

    def _from_items(self, items: Any) -> List[Dict]:
        if not isinstance(items, dict):
            raise MalformedResponse("'items' is not an object")
        records: List[Dict] = []
        for code, periods in items.items():
            code = str(code).upper()
            records.append({
                "name": COUNTRY_NAMES.get(code, code),
                "country_code": code,
                "periods": self._periods(periods, code),
            })
        return records

    def _from_country_list(self, rows: Any) -> List[Dict]:
        if not isinstance(rows, list):
            raise MalformedResponse("country list is not an array")
        records: List[Dict] = []
        for row in rows:
            if not isinstance(row, dict):
                raise MalformedResponse("country entry is not an object")
            code = row.get("country_code") or row.get("code")
            if not code:
                raise MalformedResponse("country entry without country_code")
            code = str(code).upper()
            if "periods" not in row:
                raise MalformedResponse(f"country entry {code} without periods")
            records.append({
                "name": row.get("name") or COUNTRY_NAMES.get(code, code),
                "country_code": code,
                "periods": self._periods(row["periods"], code),
            })
        return records

    def normalize(self, payload: Any) -> List[Dict]:
        if isinstance(payload, list):
            return self._from_country_list(payload)
        if isinstance(payload, dict):
            if "items" in payload:
                return self._from_items(payload["items"])
            if isinstance(payload.get("rates"), list):
                return self._from_country_list(payload["rates"])
            if "periods" in payload and ("country_code" in payload or "code" in payload):
                return self._from_country_list([payload])
        raise MalformedResponse("unrecognised rates feed shape")

    # -------------- Data --------------------

    def fetch_raw_rates(self) -> List[Dict]:
        records = self.normalize(self._get_json())
        logger.debug("Rates feed returned %d countries", len(records))
        return records
