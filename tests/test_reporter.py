from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_site
from front_pages.errors import RegistryError, ReportError
from front_pages.models import Headline
from front_pages.registry import fetch_sites
from front_pages.reporter import SnapshotReporter

HEADLINES = [
    Headline(title="First", url="https://nyt.example.com/first"),
    Headline(title="Second", url="https://nyt.example.com/second"),
]


def _session(status_code=201, body=None):
    session = MagicMock(spec=requests.Session)
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    session.post.return_value = response
    session.get.return_value = response
    return session


def test_report_posts_snapshot_json():
    session = _session(201)
    reporter = SnapshotReporter("https://collector.example.com/", "key-123", session=session)

    result = reporter.report_sync(make_site("nyt", 7), "nyt-1.png", HEADLINES)

    assert result == {"status": 201}
    args, kwargs = session.post.call_args
    assert args[0] == "https://collector.example.com/snapshots/create"
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert kwargs["json"] == {
        "api_key": "key-123",
        "snapshot": {
            "site_id": 7,
            "filename": "nyt-1.png",
            "headlines": [
                {"title": "First", "url": "https://nyt.example.com/first"},
                {"title": "Second", "url": "https://nyt.example.com/second"},
            ],
        },
    }


@pytest.mark.parametrize("status", [302, 200])
def test_report_accepts_non_error_status(status):
    reporter = SnapshotReporter("https://collector.example.com", session=_session(status))
    assert reporter.report_sync(make_site("nyt"), "nyt-1.png", [])["status"] == status


@pytest.mark.parametrize("status", [400, 500, None])
def test_report_rejects_error_or_missing_status(status):
    session = _session(status)
    reporter = SnapshotReporter("https://collector.example.com", session=session)

    with pytest.raises(ReportError):
        reporter.report_sync(make_site("nyt"), "nyt-1.png", HEADLINES)
    assert session.post.call_count == 1


def test_report_unreachable_collector():
    session = _session()
    session.post.side_effect = requests.ConnectionError("refused")
    reporter = SnapshotReporter("https://collector.example.com", session=session)

    with pytest.raises(ReportError):
        reporter.report_sync(make_site("nyt"), "nyt-1.png", HEADLINES)


@pytest.mark.asyncio
async def test_report_async_wrapper():
    reporter = SnapshotReporter("https://collector.example.com", session=_session(201))
    assert await reporter.report(make_site("nyt"), "nyt-1.png", HEADLINES) == {"status": 201}


def test_fetch_sites_parses_registry():
    body = {
        "sites": [
            {
                "id": 1,
                "name": "New York Times",
                "shortcode": "nyt",
                "url": "https://www.nytimes.com",
                "selector": "h2 a",
                "createdAt": "2019-12-01T00:00:00.000Z",
                "updatedAt": "2019-12-01T00:00:00.000Z",
            },
            {
                "id": 2,
                "name": "Le Monde",
                "shortcode": "lemonde",
                "url": "https://www.lemonde.fr",
                "selector": ".article a",
                "script": "window.scrollTo(0, 0)",
            },
        ]
    }
    session = _session(200, body)

    sites = fetch_sites("https://registry.example.com", session=session)

    assert [site.shortcode for site in sites] == ["nyt", "lemonde"]
    assert sites[1].script == "window.scrollTo(0, 0)"
    session.get.assert_called_once_with("https://registry.example.com/sites", timeout=30.0)


@pytest.mark.parametrize(
    "body",
    [{"error": "nope"}, {"sites": "nyt"}, ["not", "a", "dict"]],
)
def test_fetch_sites_without_sites_array(body):
    with pytest.raises(RegistryError):
        fetch_sites("https://registry.example.com", session=_session(200, body))


def test_fetch_sites_skips_bad_records_and_keeps_the_rest():
    good = {
        "id": 1,
        "name": "New York Times",
        "shortcode": "nyt",
        "url": "https://www.nytimes.com",
        "selector": "h2 a",
    }
    body = {
        "sites": [
            good,
            {**good, "id": 2, "shortcode": "wapo", "selector": ""},
            "not a record",
            {**good, "id": 3, "shortcode": "wsj"},
        ]
    }

    sites = fetch_sites("https://registry.example.com", session=_session(200, body))

    assert [site.shortcode for site in sites] == ["nyt", "wsj"]


def test_fetch_sites_http_error():
    session = _session(503)
    session.get.return_value.raise_for_status.side_effect = requests.HTTPError("503")

    with pytest.raises(RegistryError):
        fetch_sites("https://registry.example.com", session=session)
