"""Tests for session-type enrichment (programs and sale prices)."""

import logging

from booking_proxy.enrichment import (
    Enrichment,
    category_names,
    enrich_session_types,
    fetch_programs,
    fetch_service_prices,
    is_bookable_type,
)
from booking_proxy.errors import UpstreamRequestError


class FakeUpstream:
    def __init__(self, responses):
        self.responses = responses

    async def get(self, path, params=None, user_token=None):
        result = self.responses[path]
        if isinstance(result, Exception):
            raise result
        return result


PROGRAMS = Enrichment(
    name="programs",
    value={1: "Massages", 2: "Facials", 3: "Appointments", 4: "Service"},
)
PRICES = Enrichment(
    name="prices",
    value={"deep tissue 60": {"Name": "Deep Tissue 60", "Price": 107.0, "TaxIncluded": 7.0}},
)


def session_type(id_, name, program_id, **extra):
    return {"Id": id_, "Name": name, "ProgramId": program_id, "Type": "Appointment", **extra}


class TestEnrichSessionTypes:
    def test_category_and_pre_tax_price(self):
        [enriched] = enrich_session_types(
            [session_type(10, "Deep  Tissue 60", 1)], PROGRAMS, PRICES
        )
        assert enriched["CategoryName"] == "Massages"
        assert enriched["Price"] == 100.0

    def test_excluded_categories_dropped(self):
        types = [
            session_type(10, "Deep Tissue 60", 1),
            session_type(11, "Generic Booking", 3),
            session_type(12, "Other", 4),
            session_type(13, "Hydrafacial", 2),
        ]
        enriched = enrich_session_types(types, PROGRAMS, PRICES)
        assert [st["Id"] for st in enriched] == [10, 13]
        assert category_names(enriched) == ["Massages", "Facials"]

    def test_uncategorised_dropped_when_programs_available(self):
        enriched = enrich_session_types([session_type(10, "Mystery", 99)], PROGRAMS, PRICES)
        assert enriched == []

    def test_programs_unavailable_keeps_everything(self):
        programs = Enrichment(name="programs", error="Booking service error (500)")
        enriched = enrich_session_types([session_type(10, "Mystery", 99)], programs, PRICES)
        assert len(enriched) == 1
        assert enriched[0]["CategoryName"] is None
        assert category_names(enriched) == []

    def test_own_price_fallback(self):
        [enriched] = enrich_session_types(
            [session_type(10, "Unlisted", 1, OnlinePrice=45)], PROGRAMS, PRICES
        )
        assert enriched["Price"] == 45

    def test_description_from_sale_service(self):
        prices = Enrichment(
            name="prices",
            value={"deep tissue 60": {"Name": "Deep Tissue 60", "Description": "Firm pressure"}},
        )
        [enriched] = enrich_session_types([session_type(10, "Deep Tissue 60", 1)], PROGRAMS, prices)
        assert enriched["Description"] == "Firm pressure"

    def test_category_names_never_include_generic(self):
        types = [{"CategoryName": name} for name in ("Appointment", "Services", "Body", "Body")]
        assert category_names(types) == ["Body"]


class TestBookableType:
    def test_filters(self):
        assert is_bookable_type({"Type": "Appointment"})
        assert is_bookable_type({"Type": "Service"})
        assert not is_bookable_type({"Type": "Class"})


class TestFetch:
    async def test_programs(self):
        upstream = FakeUpstream({"/site/programs": {"Programs": [{"Id": 1, "Name": "Massages"}]}})
        result = await fetch_programs(upstream)
        assert result.available
        assert result.value == {1: "Massages"}

    async def test_prices_keyed_by_normalised_name(self):
        upstream = FakeUpstream({"/sale/services": {"Services": [{"Name": " Hot  Stone ", "Price": 90}]}})
        result = await fetch_service_prices(upstream)
        assert list(result.value) == ["hot stone"]

    async def test_unavailable_is_typed_and_logged(self, caplog):
        upstream = FakeUpstream({"/site/programs": UpstreamRequestError("boom", upstream_status=500)})
        with caplog.at_level(logging.WARNING, logger="booking_proxy.enrichment"):
            result = await fetch_programs(upstream)

        assert not result.available
        assert result.error == "boom"
        assert result.status() == {"available": False, "error": "boom"}
        assert len([r for r in caplog.records if "programs enrichment unavailable" in r.getMessage()]) == 1
