"""Pytest configuration and shared fixtures.

Provides a fake rates fetcher (counts calls, can fail or block), a fixed clock
and sample feed records. No test touches the network.
"""
import sys
import threading
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from euvat.application.rate_catalog import RateCatalog


# ── Feed samples ─────────────────────────────────────────────────────

NL_RECORD = {
    "name": "Netherlands",
    "country_code": "NL",
    "periods": [
        {"effective_from": "2001-01-01", "rates": {"standard": 19}},
        {"effective_from": "2012-01-01", "rates": {"standard": 21, "reduced": 6}},
    ],
}

RO_RECORD = {
    "name": "Romania",
    "country_code": "RO",
    "periods": [
        {"effective_from": "0000-01-01", "rates": {"standard": Decimal("24"), "reduced": 9}},
        {"effective_from": "2017-01-01", "rates": {"standard": 19, "reduced": 9, "super_reduced": 5}},
    ],
}


def make_records():
    """Fresh copies so a test cannot leak mutations into another."""
    import copy
    return copy.deepcopy([NL_RECORD, RO_RECORD])


# ── Fake collaborators ───────────────────────────────────────────────

class FakeFetcher:
    """Stands in for RatesFeedAdapter.

    errors: exceptions raised on successive calls (None = succeed).
    gate:   if set, fetch blocks until the event is set (for race tests).
    """

    def __init__(self, records=None, errors=None, gate=None):
        self.records = make_records() if records is None else records
        self.errors = list(errors or [])
        self.gate = gate
        self.calls = 0
        self.entered = threading.Event()
        self._lock = threading.Lock()

    def fetch_raw_rates(self):
        with self._lock:
            self.calls += 1
            error = self.errors.pop(0) if self.errors else None
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if error is not None:
            raise error
        return self.records


@pytest.fixture()
def today():
    return date(2020, 1, 1)


@pytest.fixture()
def clock(today):
    return lambda: today


@pytest.fixture()
def fetcher():
    return FakeFetcher()


@pytest.fixture()
def catalog(fetcher, clock):
    return RateCatalog(fetcher, clock=clock)
