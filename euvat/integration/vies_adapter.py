# integration/vies_adapter.py
from __future__ import annotations
from typing import Dict, Optional
from xml.sax.saxutils import escape
import logging
import requests
import xml.etree.ElementTree as ET
from euvat.core.config import Config
from euvat.core.errors import InvalidVATNumber, MalformedResponse, ServiceUnavailable
from euvat.domain.models import ViesResponse
from euvat.domain.number_formats import split_number

logger = logging.getLogger(__name__)

ENVELOPE_TEMPLATE = """<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/">
<soapenv:Header/>
<soapenv:Body>
  <checkVat xmlns="urn:ec.europa.eu:taxud:vies:services:checkVat:types">
    <countryCode>{country_code}</countryCode>
    <vatNumber>{vat_number}</vatNumber>
  </checkVat>
</soapenv:Body>
</soapenv:Envelope>"""


def build_envelope(number: str) -> str:
    country_code, vat_number = split_number(number)
    return ENVELOPE_TEMPLATE.format(
        country_code=escape(country_code),
        vat_number=escape(vat_number),
    )


def _local(tag: str) -> str:
    # "{urn:...}valid" -> "valid"
    return tag.rsplit("}", 1)[-1].lower()


class ViesAdapter:
    """
    VIES checkVat (SOAP). Zwraca ViesResponse albo podnosi:
      - InvalidVATNumber   – numer za krótki / VIES zwrócił INVALID_INPUT,
      - ServiceUnavailable – transport, status HTTP, pozostałe SOAP Fault (MS_UNAVAILABLE itd.),
      - MalformedResponse  – XML nie do sparsowania albo brak checkVatResponse.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.s = session or requests.Session()
        self.url = url or Config.VIES_SERVICE_URL
        self.timeout = Config.SERVICE_TIMEOUT if timeout is None else timeout

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "text/xml;charset=UTF-8", "User-Agent": Config.HTTP_USER_AGENT}

    def _post(self, envelope: str) -> bytes:
        try:
            r = self.s.post(
                self.url,
                data=envelope.encode("utf-8"),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("VIES unreachable at %s: %s", self.url, e)
            raise ServiceUnavailable(f"VIES unreachable: {e}") from e
        # INVALID_INPUT przychodzi jako SOAP Fault z HTTP 500 – sprawdzamy przed statusem
        if b"INVALID_INPUT" in r.content:
            raise InvalidVATNumber("VIES rejected the VAT number as invalid input")
        if r.status_code >= 400:
            fault = self._fault_string(r.content)
            logger.warning("VIES returned HTTP %s: %s", r.status_code, fault)
            raise ServiceUnavailable(f"VIES returned HTTP {r.status_code}: {fault or 'no detail'}")
        return r.content

    @staticmethod
    def _fault_string(content: bytes) -> Optional[str]:
        try:
            root = ET.fromstring(content)
        except ET.ParseError:
            return None
        for node in root.iter():
            if _local(node.tag) == "faultstring":
                return (node.text or "").strip() or None
        return None

    def _parse(self, content: bytes) -> ViesResponse:
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise MalformedResponse(f"VIES XML parse error: {e}") from e

        fault = None
        body = None
        for node in root.iter():
            tag = _local(node.tag)
            if tag == "fault":
                fault = node
            elif tag == "checkvatresponse":
                body = node
                break
        if body is None:
            if fault is not None:
                raise ServiceUnavailable(f"VIES fault: {self._fault_string(content) or 'unknown'}")
            raise MalformedResponse("VIES response without checkVatResponse")

        fields: Dict[str, str] = {}
        for child in body:
            fields[_local(child.tag)] = (child.text or "").strip()
        if "valid" not in fields:
            raise MalformedResponse("VIES response without 'valid' element")

        return ViesResponse(
            country_code=fields.get("countrycode", ""),
            vat_number=fields.get("vatnumber", ""),
            request_date=fields.get("requestdate", ""),
            valid=fields["valid"].lower() == "true",
            # VIES zwraca "---" gdy nie ujawnia danych
            name=fields.get("name") if fields.get("name") not in (None, "", "---") else None,
            address=fields.get("address") if fields.get("address") not in (None, "", "---") else None,
        )

    def check_vat(self, number: str) -> ViesResponse:
        country_code, vat_number = split_number(number)
        if len(country_code + vat_number) < 3:
            raise InvalidVATNumber(f"VAT number too short: {number!r}")
        logger.debug("VIES checkVat %s %s", country_code, vat_number)
        content = self._post(build_envelope(number))
        return self._parse(content)
