"""Smoke test: full daily job (search -> dedup -> match -> notify) with mocked externals."""

import logging
from unittest.mock import MagicMock, patch

import httpx
import pytest
import respx

from grant_search.adapters import GrantsGovAdapter, NsfAdapter
from grant_search.config.config import Config
from grant_search.main import fetch_daily_opportunities, main, run_daily_job
from grant_search.models import MatchStatus

GRANTS_GOV_HITS = {
    "data": {
        "hitCount": 2,
        "oppHits": [
            {
                "id": "ED-1",
                "title": "Adult Literacy Education Grants",
                "agency": "Department of Education",
                "closeDate": "12/31/2099",
                "applicantEligibility": "Nonprofit organizations",
                "awardCeiling": "$250,000",
            },
            {"id": "HW-2", "title": "Highway Bridge Rehabilitation"},
        ],
    }
}

NSF_AWARDS = {"response": {"award": [{"id": "2401", "title": "Learning sciences in California schools"}]}}


def _config(**overrides) -> Config:
    values = {
        "enabled_sources": "grants_gov,nsf",
        "daily_search_terms": "education,literacy",
        "resend_api_key": None,
        "supabase_url": None,
        "supabase_key": None,
        "taxonomy_file": None,
    }
    values.update(overrides)
    return Config(_env_file=None, **values)


def _mock_sources():
    respx.post(GrantsGovAdapter.API_URL).mock(return_value=httpx.Response(200, json=GRANTS_GOV_HITS))
    respx.get(NsfAdapter.API_URL).mock(return_value=httpx.Response(200, json=NSF_AWARDS))


@pytest.mark.asyncio
@respx.mock
async def test_fetch_dedupes_across_search_terms():
    _mock_sources()

    opportunities = await fetch_daily_opportunities(_config())

    # Each source returns the same records for both terms
    assert sorted(o.source_record_id for o in opportunities) == ["2401", "ED-1", "HW-2"]


@pytest.mark.asyncio
@respx.mock
async def test_daily_job_preview_mode():
    _mock_sources()

    summary = await run_daily_job(_config())

    assert summary["success"] is True
    steps = {s["step"]: s for s in summary["steps"]}
    assert steps["fetch_grants"]["count"] == 3
    assert steps["match_grants"]["preview"] is True
    assert steps["match_grants"]["total_matches"] >= 1
    assert steps["send_notifications"]["emails_sent"] == 0


@pytest.mark.asyncio
@respx.mock
async def test_daily_job_with_store(store_factory, nonprofit_profile):
    _mock_sources()
    store = store_factory([nonprofit_profile])

    with patch("grant_search.main.SupabaseClient", return_value=store) as mock_client:
        summary = await run_daily_job(
            _config(supabase_url="https://fake.supabase.co", supabase_key="fake-key")
        )

    mock_client.assert_called_once_with("https://fake.supabase.co", "fake-key")
    assert summary["success"] is True
    assert summary["errors"] == []
    steps = {s["step"]: s for s in summary["steps"]}
    assert steps["match_grants"]["profiles_processed"] == 1
    assert steps["send_notifications"]["emails_sent"] == 1
    assert ("p1", "ED-1", "grants_gov") in store.matches
    assert all(m.status == MatchStatus.SENT for m in store.matches.values())
    assert store.notification_log[0]["notification_type"] == "daily"


@pytest.mark.asyncio
@respx.mock
async def test_daily_job_survives_source_outage():
    respx.post(GrantsGovAdapter.API_URL).mock(return_value=httpx.Response(503))
    respx.get(NsfAdapter.API_URL).mock(return_value=httpx.Response(200, json=NSF_AWARDS))

    summary = await run_daily_job(_config())

    assert summary["success"] is True
    assert summary["steps"][0]["count"] == 1


@pytest.mark.asyncio
async def test_daily_job_reports_bad_taxonomy_file():
    summary = await run_daily_job(_config(taxonomy_file="/nonexistent/taxonomy.yaml"))

    assert summary["success"] is False
    assert "Taxonomy file not found" in summary["errors"][0]


def test_main_once_runs_a_single_cycle():
    with patch("grant_search.main.load_config", return_value=_config()), \
            patch("grant_search.main.run_daily_job", new_callable=MagicMock) as mock_job, \
            patch("grant_search.main.asyncio.run") as mock_run:
        main(["--once"])

    mock_job.assert_called_once()
    mock_run.assert_called_once_with(mock_job.return_value)


@pytest.mark.asyncio
@respx.mock
async def test_daily_job_logs_completion_line(caplog):
    _mock_sources()

    with caplog.at_level(logging.INFO, logger="grant_search.main"):
        await run_daily_job(_config())

    messages = [r.getMessage() for r in caplog.records if r.name == "grant_search.main"]
    assert "Total unique opportunities fetched: 3" in messages
    assert any(m.startswith("Daily job completed in ") and m.endswith("(errors=0)") for m in messages)
