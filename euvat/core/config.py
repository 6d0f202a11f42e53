# core/config.py
import os


class Config:
    # Wspólny timeout (sekundy) dla wszystkich zapytań HTTP – feed stawek i VIES
    SERVICE_TIMEOUT = float(os.environ.get("SERVICE_TIMEOUT", "10"))
    HTTP_USER_AGENT = os.environ.get("HTTP_USER_AGENT", "euvat/1.0")

    # Stawki VAT – ibericode/vat-rates (JSON)
    RATES_FEED_URL = os.environ.get(
        "RATES_FEED_URL",
        "https://raw.githubusercontent.com/ibericode/vat-rates/master/vat-rates.json",
    )
    DEFAULT_RATE_LEVEL = os.environ.get("DEFAULT_RATE_LEVEL", "standard")

    # VIES – SOAP checkVat
    VIES_SERVICE_URL = os.environ.get(
        "VIES_SERVICE_URL",
        "http://ec.europa.eu/taxation_customs/vies/services/checkVatService",
    )

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
