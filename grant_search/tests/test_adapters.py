"""Unit tests for source adapters with mocked httpx responses (respx)."""

import json

import httpx
import pytest
import respx

from grant_search.adapters import (
    ADAPTER_CLASSES,
    CaliforniaGrantsAdapter,
    FederalReporterAdapter,
    FemaAdapter,
    GrantsGovAdapter,
    NihReporterAdapter,
    NsfAdapter,
    ProPublicaAdapter,
    RegulationsAdapter,
    SamGovAdapter,
    UsaSpendingAdapter,
    build_adapters,
)
from grant_search.adapters.california import DATASET_ID
from grant_search.adapters.nih_reporter import FEDERAL_REPORTER_AGENCIES, recent_fiscal_years
from grant_search.config.config import Config
from grant_search.errors import InvalidUserInput
from grant_search.models import SourceId


def _body(route) -> dict:
    return json.loads(route.calls.last.request.content)


def _params(route):
    return route.calls.last.request.url.params


# ---------------------------------------------------------------------------
# Grants.gov
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@respx.mock
async def test_grants_gov_adapter_returns_opportunities(sample_grants_gov_response):
    route = respx.post(GrantsGovAdapter.API_URL).mock(
        return_value=httpx.Response(200, json=sample_grants_gov_response)
    )

    adapter = GrantsGovAdapter(attribution_header="Test Pipeline")
    result = await adapter.search("community services", page=2)

    assert result.ok
    assert len(result.opportunities) == 2
    opp = result.opportunities[0]
    assert opp.source == SourceId.GRANTS_GOV
    assert opp.source_record_id == "335512"
    assert opp.title == "Community Services Block Grant"
    assert opp.agency == "Department of Health and Human Services"
    assert opp.posted_date == "2024-01-15"
    assert result.opportunities[1].deadline_date is None

    body = _body(route)
    assert body["keyword"] == "community services"
    assert body["oppStatuses"] == "forecasted|posted"
    assert body["rows"] == 50
    assert body["startRecordNum"] == 50
    assert route.calls.last.request.headers["User-Agent"] == "Test Pipeline"


@pytest.mark.asyncio
@respx.mock
async def test_grants_gov_accepts_unwrapped_payload():
    respx.post(GrantsGovAdapter.API_URL).mock(
        return_value=httpx.Response(200, json={"hitCount": 1, "oppHits": [{"id": "9", "title": "Flat"}]})
    )

    result = await GrantsGovAdapter().search("flat")

    assert [o.title for o in result.opportunities] == ["Flat"]
    assert result.total == 1


# ---------------------------------------------------------------------------
# SAM.gov
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@respx.mock
async def test_sam_gov_adapter_requires_and_sends_key(sample_sam_gov_response):
    route = respx.get(SamGovAdapter.API_URL).mock(return_value=httpx.Response(200, json=sample_sam_gov_response))

    adapter = SamGovAdapter(api_key="test-key", opportunity_type="o")
    result = await adapter.search("machine learning", page=3)

    assert result.total == 1
    assert result.opportunities[0].source_record_id == "abc123"

    params = _params(route)
    assert params["api_key"] == "test-key"
    assert params["q"] == "machine learning"
    assert params["limit"] == "50"
    assert params["offset"] == "100"
    assert params["ptype"] == "o"
    assert len(params["postedFrom"]) == 10


# ---------------------------------------------------------------------------
# Research sources
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@respx.mock
async def test_nih_reporter_request_and_parse():
    route = respx.post(NihReporterAdapter.API_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "meta": {"total": 2},
                "results": [
                    {"appl_id": 111, "project_title": "Cancer Genomics", "agency_ic_fundings": [{"total_cost": 5000}]},
                    {"appl_id": 222, "project_title": "Aging Cohort"},
                ],
            },
        )
    )

    result = await NihReporterAdapter().search("genomics")

    assert [o.source_record_id for o in result.opportunities] == ["111", "222"]
    assert result.opportunities[0].amount == 5000
    body = _body(route)
    assert body["criteria"]["advanced_text_search"]["search_text"] == "genomics"
    assert body["criteria"]["fiscal_years"] == recent_fiscal_years()
    assert "agencies" not in body["criteria"]
    assert body["sort_field"] == "award_amount"
    assert body["sort_order"] == "desc"


@pytest.mark.asyncio
@respx.mock
async def test_federal_reporter_restricts_agencies():
    route = respx.post(FederalReporterAdapter.API_URL).mock(
        return_value=httpx.Response(200, json={"meta": {"total": 0}, "results": []})
    )

    result = await FederalReporterAdapter().search("opioid")

    assert result.source == SourceId.FEDERAL_REPORTER
    assert result.opportunities == []
    assert _body(route)["criteria"]["agencies"] == FEDERAL_REPORTER_AGENCIES


def test_recent_fiscal_years_covers_five_years():
    from datetime import datetime

    assert recent_fiscal_years(datetime(2025, 3, 1)) == [2025, 2024, 2023, 2022, 2021]


@pytest.mark.asyncio
@respx.mock
async def test_nsf_estimates_total_from_full_page():
    awards = [{"id": str(i), "title": f"Award {i}"} for i in range(25)]
    route = respx.get(NsfAdapter.API_URL).mock(
        return_value=httpx.Response(200, json={"response": {"award": awards}})
    )

    result = await NsfAdapter().search("quantum", page=2)

    assert result.total == 75
    assert result.total_is_estimate is True
    params = _params(route)
    assert params["keyword"] == "quantum"
    assert params["offset"] == "26"
    assert params["rpp"] == "25"


@pytest.mark.asyncio
@respx.mock
async def test_nsf_partial_page_total_is_exact():
    respx.get(NsfAdapter.API_URL).mock(
        return_value=httpx.Response(200, json={"response": {"award": [{"id": "1"}, {"id": "2"}]}})
    )

    result = await NsfAdapter().search("quantum", page=3)

    assert result.total == 52
    assert result.total_pages == 3


# ---------------------------------------------------------------------------
# Awards, nonprofits, regulatory, state
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@respx.mock
async def test_usaspending_request_body():
    route = respx.post(UsaSpendingAdapter.API_URL).mock(
        return_value=httpx.Response(
            200,
            json={"results": [{"generated_internal_id": "ASST_1", "Award Amount": 900}], "page_metadata": {"total": 1}},
        )
    )

    result = await UsaSpendingAdapter().search("broadband")

    assert result.opportunities[0].amount == 900
    body = _body(route)
    assert body["filters"]["keywords"] == ["broadband"]
    assert body["filters"]["award_type_codes"] == ["02", "03", "04", "05"]
    assert body["filters"]["time_period"][0]["start_date"] == "2020-01-01"
    assert body["sort"] == "Award Amount"
    assert body["subawards"] is False


@pytest.mark.asyncio
@respx.mock
async def test_fema_escapes_quotes_in_filter():
    route = respx.get(FemaAdapter.API_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "metadata": {"count": 1},
                "PublicAssistanceGrantAwardActivities": [{"disasterNumber": 4001, "projectNumber": 9}],
            },
        )
    )

    result = await FemaAdapter(state="Texas").search("o'brien")

    assert result.opportunities[0].source_record_id == "4001-9"
    params = _params(route)
    assert "contains(applicantName,'o''brien')" in params["$filter"]
    assert "state eq 'Texas'" in params["$filter"]
    assert params["$top"] == "50"
    assert params["$inlinecount"] == "allpages"


@pytest.mark.asyncio
@respx.mock
async def test_propublica_zero_based_pages_and_fallback_total():
    route = respx.get(ProPublicaAdapter.API_URL).mock(
        return_value=httpx.Response(200, json={"num_pages": 4, "organizations": [{"ein": 123, "name": "Food Bank"}]})
    )

    result = await ProPublicaAdapter(state="CA").search("food", page=2)

    assert result.total == 100
    params = _params(route)
    assert params["page"] == "1"
    assert params["state[id]"] == "CA"


@pytest.mark.asyncio
@respx.mock
async def test_regulations_sends_key_header():
    route = respx.get(RegulationsAdapter.API_URL).mock(
        return_value=httpx.Response(
            200,
            json={"meta": {"totalElements": 1}, "data": [{"id": "DOC-1", "attributes": {"title": "Rule"}}]},
        )
    )

    result = await RegulationsAdapter(api_key="reg-key").search("grants")

    assert result.opportunities[0].title == "Rule"
    request = route.calls.last.request
    assert request.headers["X-Api-Key"] == "reg-key"
    assert request.url.params["filter[searchTerm]"] == "grants"
    assert request.url.params["sort"] == "-postedDate"


@pytest.mark.asyncio
@respx.mock
async def test_california_request_and_parse():
    route = respx.get(CaliforniaGrantsAdapter.API_URL).mock(
        return_value=httpx.Response(
            200,
            json={"success": True, "result": {"total": 1, "records": [{"_id": 5, "title": "Wildfire Resilience"}]}},
        )
    )

    result = await CaliforniaGrantsAdapter(category="Environment").search("wildfire")

    assert result.opportunities[0].source_record_id == "5"
    params = _params(route)
    assert params["resource_id"] == DATASET_ID
    assert json.loads(params["filters"]) == {"category": "Environment"}


@pytest.mark.asyncio
@respx.mock
async def test_california_unsuccessful_envelope_is_source_error():
    respx.get(CaliforniaGrantsAdapter.API_URL).mock(
        return_value=httpx.Response(200, json={"success": False, "error": {"message": "bad resource"}})
    )

    result = await CaliforniaGrantsAdapter().safe_search("wildfire")

    assert result.opportunities == []
    assert result.error == "California Grants error: bad resource"


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_empty_keyword_rejected():
    with pytest.raises(InvalidUserInput):
        await NsfAdapter().search("  ")


@pytest.mark.asyncio
@respx.mock
async def test_records_without_id_are_dropped():
    respx.get(NsfAdapter.API_URL).mock(
        return_value=httpx.Response(200, json={"response": {"award": [{"title": "no id"}, {"id": "7"}]}})
    )

    result = await NsfAdapter().search("x-ray")

    assert [o.source_record_id for o in result.opportunities] == ["7"]


def test_adapter_registry_covers_every_source():
    assert set(ADAPTER_CLASSES) == set(SourceId)
    for source, adapter_cls in ADAPTER_CLASSES.items():
        assert adapter_cls.source == source


def test_build_adapters_passes_keys():
    config = Config(
        _env_file=None,
        enabled_sources="grants_gov,sam_gov,regulations,nsf",
        sam_api_key="sam-key",
        regulations_api_key="reg-key",
        grants_gov_attribution="Attribution",
    )

    adapters = build_adapters(config)

    assert [a.source for a in adapters] == [
        SourceId.GRANTS_GOV,
        SourceId.SAM_GOV,
        SourceId.NSF,
        SourceId.REGULATIONS,
    ]
    by_source = {a.source: a for a in adapters}
    assert by_source[SourceId.GRANTS_GOV].attribution_header == "Attribution"
    assert by_source[SourceId.SAM_GOV].api_key == "sam-key"
    assert by_source[SourceId.REGULATIONS].api_key == "reg-key"
