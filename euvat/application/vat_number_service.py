# application/vat_number_service.py
from __future__ import annotations
from typing import Dict, Optional
from euvat.domain.models import ViesResponse
from euvat.domain.number_formats import normalize_number, validate_number_format
from euvat.integration.vies_adapter import ViesAdapter


class VatNumberService:
    """
    Walidacja numerów VAT: format (lokalnie, regex per kraj) + istnienie (VIES).
    Istnienie sprawdzamy tylko dla numerów o poprawnym formacie.
    """

    def __init__(self, vies: Optional[ViesAdapter] = None) -> None:
        self._vies = vies or ViesAdapter()

    def validate_number_format(self, number: str) -> bool:
        return validate_number_format(number)

    def lookup(self, number: str) -> ViesResponse:
        return self._vies.check_vat(number)

    def validate_number_existence(self, number: str) -> bool:
        return self.lookup(number).valid

    def validate_number(self, number: str) -> bool:
        if not self.validate_number_format(number):
            return False
        return self.validate_number_existence(number)

    def as_api_payload(self, number: str, check_existence: bool = False) -> Dict:
        payload: Dict = {
            "number": normalize_number(number),
            "format_valid": self.validate_number_format(number),
        }
        if check_existence:
            if not payload["format_valid"]:
                payload["valid"] = False
                return payload
            r = self.lookup(number)
            payload.update({
                "valid": r.valid,
                "country_code": r.country_code,
                "vat_number": r.vat_number,
                "request_date": r.request_date,
                "name": r.name,
                "address": r.address,
            })
        return payload
