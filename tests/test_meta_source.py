import json

import httpx
import pytest

from conftest import build_settings, mock_client
from duoreport.connectors.meta.source import MetaSource
from duoreport.core.errors import UpstreamFetchError
from duoreport.models.metrics_models import BaseMetrics


def _row(day, spend="10.50", clicks="20", impressions="1000", actions=None):
    row = {"date_start": day, "date_stop": day, "spend": spend, "clicks": clicks, "impressions": impressions}
    if actions is not None:
        row["actions"] = actions
    return row


async def test_fetch_maps_daily_rows(settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "data": [
                    _row(
                        "2024-01-01",
                        actions=[
                            {"action_type": "link_click", "value": "15"},
                            {"action_type": "SurveyCompleted", "value": "3"},
                        ],
                    ),
                    _row("2024-01-02", spend="0", clicks="0", impressions="0"),
                ]
            },
        )

    async with mock_client(handler) as http:
        daily = await MetaSource(settings, http_client=http).fetch("2024-01-01", "2024-01-03")

    assert daily == {
        "2024-01-01": BaseMetrics(clicks=20, impressions=1000, cost=10.5, conversions=3),
        "2024-01-02": BaseMetrics(),
    }
    assert len(seen) == 1
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/v19.0/act_1234567890/insights"
    params = request.url.params
    assert params["level"] == "account"
    assert params["time_increment"] == "1"
    assert params["fields"] == "spend,clicks,impressions,actions"
    assert json.loads(params["time_range"]) == {"since": "2024-01-01", "until": "2024-01-03"}
    assert params["limit"] == "3"
    assert params["access_token"] == "meta-token"


async def test_missing_or_garbage_fields_become_zero(settings):
    def handler(request):
        return httpx.Response(
            200,
            json={
                "data": [
                    {"date_start": "2024-01-05", "spend": "n/a", "clicks": None},
                    {"date_start": "2024-01-06", "impressions": "12.9", "actions": "oops"},
                    {"spend": "4.00"},
                    "not-a-row",
                ]
            },
        )

    async with mock_client(handler) as http:
        daily = await MetaSource(settings, http_client=http).fetch("2024-01-05", "2024-01-06")

    assert daily == {
        "2024-01-05": BaseMetrics(),
        "2024-01-06": BaseMetrics(impressions=12),
    }


async def test_conversion_action_is_configurable():
    settings = build_settings(meta_conversion_action="offsite_conversion.custom.42")

    def handler(request):
        return httpx.Response(
            200,
            json={
                "data": [
                    _row(
                        "2024-01-01",
                        actions=[
                            {"action_type": "SurveyCompleted", "value": "9"},
                            {"action_type": "offsite_conversion.custom.42", "value": "4"},
                        ],
                    )
                ]
            },
        )

    async with mock_client(handler) as http:
        daily = await MetaSource(settings, http_client=http).fetch("2024-01-01", "2024-01-01")

    assert daily["2024-01-01"].conversions == 4


async def test_follows_paging_next(settings):
    next_url = "https://graph.facebook.com/v19.0/act_1234567890/insights?after=CURSOR&access_token=meta-token"

    def handler(request):
        if request.url.params.get("after") == "CURSOR":
            return httpx.Response(200, json={"data": [_row("2024-01-02")]})
        return httpx.Response(200, json={"data": [_row("2024-01-01")], "paging": {"next": next_url}})

    async with mock_client(handler) as http:
        daily = await MetaSource(settings, http_client=http).fetch("2024-01-01", "2024-01-02")

    assert sorted(daily) == ["2024-01-01", "2024-01-02"]


async def test_account_id_with_prefix_is_not_doubled():
    settings = build_settings(meta_ad_account_id="act_555")
    paths = []

    def handler(request):
        paths.append(request.url.path)
        return httpx.Response(200, json={"data": []})

    async with mock_client(handler) as http:
        assert await MetaSource(settings, http_client=http).fetch("2024-01-01", "2024-01-01") == {}

    assert paths == ["/v19.0/act_555/insights"]


async def test_unconfigured_returns_empty_without_calling():
    settings = build_settings(meta_access_token="")

    def handler(request):
        raise AssertionError("upstream must not be called")

    async with mock_client(handler) as http:
        source = MetaSource(settings, http_client=http)
        assert source.is_configured() is False
        assert await source.fetch("2024-01-01", "2024-01-31") == {}


async def test_error_status_raises_with_upstream_message(settings):
    def handler(request):
        return httpx.Response(
            400,
            json={"error": {"message": "Invalid OAuth access token.", "code": 190}},
        )

    async with mock_client(handler) as http:
        with pytest.raises(UpstreamFetchError) as exc:
            await MetaSource(settings, http_client=http).fetch("2024-01-01", "2024-01-02")

    assert exc.value.platform == "meta"
    assert exc.value.status_code == 400
    assert exc.value.error_code == 190
    assert "Invalid OAuth access token." in str(exc.value)


async def test_error_payload_with_success_status_raises(settings):
    def handler(request):
        return httpx.Response(200, json={"error": {"message": "Unsupported get request", "code": 100}})

    async with mock_client(handler) as http:
        with pytest.raises(UpstreamFetchError, match="Unsupported get request"):
            await MetaSource(settings, http_client=http).fetch("2024-01-01", "2024-01-02")


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>gateway</html>"),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, json={"data": "nope"}),
    ],
)
async def test_malformed_body_raises(settings, response):
    async with mock_client(lambda request: response) as http:
        with pytest.raises(UpstreamFetchError):
            await MetaSource(settings, http_client=http).fetch("2024-01-01", "2024-01-02")


async def test_server_error_is_retried(settings):
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(503, json={"error": {"message": "Service temporarily unavailable"}})
        return httpx.Response(200, json={"data": [_row("2024-01-01")]})

    async with mock_client(handler) as http:
        daily = await MetaSource(settings, http_client=http).fetch("2024-01-01", "2024-01-01")

    assert len(attempts) == 3
    assert daily["2024-01-01"].clicks == 20


async def test_persistent_server_error_gives_up(settings):
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(500, json={"error": {"message": "An unknown error occurred", "code": 1}})

    async with mock_client(handler) as http:
        with pytest.raises(UpstreamFetchError, match="An unknown error occurred"):
            await MetaSource(settings, http_client=http).fetch("2024-01-01", "2024-01-01")

    assert len(attempts) == settings.upstream_max_retries
