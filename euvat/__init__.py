"""
euvat – europejski VAT: walidacja numerów (format + VIES) i stawki VAT w czasie.

Stawka obowiązująca dziś dla kraju:

    from euvat import RateCatalog
    from euvat.integration.rates_feed_adapter import RatesFeedAdapter

    catalog = RateCatalog(RatesFeedAdapter())
    catalog.lookup("NL").rate("standard")

Walidacja numeru:

    from euvat.application.vat_number_service import VatNumberService
    VatNumberService().validate_number("NL123456789B01")

Adaptery HTTP czytają Config przy imporcie, dlatego nie są importowane tutaj.
"""
from euvat.application.rate_catalog import RateCatalog
from euvat.core.errors import (
    InvalidVATNumber,
    MalformedResponse,
    NoActivePeriod,
    ServiceUnavailable,
    UnknownCountryCode,
    UnknownRateLevel,
    VATError,
)
from euvat.domain.models import CountryRateTable, RatePeriod, ViesResponse
from euvat.domain.number_formats import validate_number_format

__all__ = [
    "RateCatalog",
    "CountryRateTable",
    "RatePeriod",
    "ViesResponse",
    "validate_number_format",
    "VATError",
    "ServiceUnavailable",
    "MalformedResponse",
    "InvalidVATNumber",
    "UnknownCountryCode",
    "UnknownRateLevel",
    "NoActivePeriod",
]
