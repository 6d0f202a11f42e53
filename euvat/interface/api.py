# interface/api.py
from datetime import datetime
from typing import Dict, Optional

from flask import Blueprint, current_app, jsonify, request

from euvat.core.errors import (
    InvalidVATNumber,
    MalformedResponse,
    NoActivePeriod,
    ServiceUnavailable,
    UnknownCountryCode,
    UnknownRateLevel,
    VATError,
)
from euvat.domain.models import CountryRateTable

api_bp = Blueprint("api", __name__, url_prefix="/api")

ERROR_STATUS = {
    UnknownCountryCode: 404,
    UnknownRateLevel: 404,
    NoActivePeriod: 404,
    InvalidVATNumber: 422,
    MalformedResponse: 502,
    ServiceUnavailable: 503,
}


class BadQueryParam(VATError):
    pass


def _services() -> Dict:
    return current_app.extensions["euvat"]


def _as_of():
    raw = request.args.get("date")
    if not raw:
        return _services()["catalog"].clock()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise BadQueryParam(f"Invalid 'date' parameter {raw!r} (expected YYYY-MM-DD)")


def _current_rates(table: CountryRateTable, as_of) -> Optional[Dict[str, float]]:
    try:
        period = table.active_period(as_of)
    except NoActivePeriod:
        return None
    return {level: float(rate) for level, rate in period.rates.items()}


@api_bp.errorhandler(VATError)
def handle_vat_error(err: VATError):
    status = 400 if isinstance(err, BadQueryParam) else 500
    for cls, code in ERROR_STATUS.items():
        if isinstance(err, cls):
            status = code
            break
    if status >= 500:
        current_app.logger.warning("API error %s: %s", status, err)
    return jsonify({"error": str(err)}), status


@api_bp.route("/rates")
def get_all_rates():
    """Wszystkie kraje z aktualnie obowiązującymi stawkami (?date=YYYY-MM-DD opcjonalnie)."""
    as_of = _as_of()
    catalog = _services()["catalog"]
    tables = catalog.tables()
    return jsonify({
        "as_of": as_of.isoformat(),
        # wiek danych – katalog sam się nie odświeża
        "populated_at": catalog.populated_at.isoformat(),
        "countries": [
            {
                "country_code": t.country_code,
                "name": t.name,
                "rates": _current_rates(t, as_of),
            }
            for t in tables
        ],
    })


@api_bp.route("/rates/<country_code>")
def get_rate(country_code: str):
    """
    Stawka VAT kraju na dzień.

    Parametry:
      ?level=standard (domyślnie DEFAULT_RATE_LEVEL)
      ?date=YYYY-MM-DD (domyślnie dziś)
    """
    level = request.args.get("level") or current_app.config.get("DEFAULT_RATE_LEVEL", "standard")
    as_of = _as_of()
    table = _services()["catalog"].lookup(country_code.upper())
    rate = table.rate_on(as_of, level)
    return jsonify({
        "country_code": table.country_code,
        "name": table.name,
        "as_of": as_of.isoformat(),
        "level": level,
        "rate": float(rate),
    })


@api_bp.route("/rates/<country_code>/periods")
def get_periods(country_code: str):
    table = _services()["catalog"].lookup(country_code.upper())
    periods = sorted(table.periods, key=lambda p: p.effective_from)
    return jsonify({
        "country_code": table.country_code,
        "name": table.name,
        "periods": [
            {
                "effective_from": p.effective_from.isoformat(),
                "rates": {level: float(rate) for level, rate in p.rates.items()},
            }
            for p in periods
        ],
    })


@api_bp.route("/vat/<number>")
def check_vat_number(number: str):
    """
    Walidacja numeru VAT.

    Parametry:
      ?check=existence – dodatkowo zapytanie do VIES
    """
    check_existence = request.args.get("check", "").lower() == "existence"
    return jsonify(_services()["numbers"].as_api_payload(number, check_existence=check_existence))
