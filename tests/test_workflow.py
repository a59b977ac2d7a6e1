"""End-to-end analyzer tests: pipeline and HTTP surface."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from app.graph.lg_workflow import analyze_site, run_workflow
from app.graph.nodes import build_opportunities, build_raw_data
from app.main import app
from models.analysis_models import QueryResult
from models.site_models import HeadingItem, PageContent

from html_fixtures import build_article_html, html_response


def _query(text: str, position: str) -> QueryResult:
    return QueryResult(
        query=text,
        search_volume="medium",
        your_position=position,
        opportunity=position != "cited",
    )


# --- all fetches fail ---


def test_unreachable_domain_still_produces_report(offline):
    analysis = analyze_site("unreachable-acme.io")

    assert offline.call_count == 4
    assert analysis.raw_data.pages_analyzed == 0
    assert analysis.raw_data.word_count == 0
    assert analysis.score.overall == 22
    assert analysis.score.grade == "D"
    assert analysis.score.breakdown.structured_data == 15
    assert [t.id for t in analysis.tips] == [
        "structured-data",
        "headings",
        "author",
        "freshness",
        "lists",
        "citations",
    ]
    assert len(analysis.queries) == 6
    assert all(q.your_position == "unknown" for q in analysis.queries)
    assert [o.query for o in analysis.opportunities] == [q.query for q in analysis.queries[:3]]


def test_progress_messages_cover_every_node(offline):
    state = run_workflow("https://www.Acme.io/")
    assert state["domain"] == "acme.io"
    assert state["current_node"] == "report"
    nodes = {m.split("]")[0].lstrip("[") for m in state["progress_messages"]}
    assert nodes == {"fetch", "scoring", "tips", "query", "report"}


# --- single rich page ---


def test_single_faq_page_scores_above_improvement_thresholds():
    html = build_article_html(words=1800, h2_count=5, list_items=3)

    def fake_get(url, **kwargs):
        if url == "https://acme.io":
            return html_response(html)
        raise requests.ConnectionError("refused")

    with patch("services.crawler.requests.get", side_effect=fake_get):
        analysis = analyze_site("acme.io")

    breakdown = analysis.score.breakdown
    assert analysis.raw_data.pages_analyzed == 1
    assert analysis.raw_data.structured_data_found == ["FAQPage"]
    assert analysis.raw_data.lists_count == 3
    assert analysis.raw_data.has_author_info is True
    assert breakdown.structured_data >= 60
    assert breakdown.content_clarity >= 65
    ids = [t.id for t in analysis.tips]
    assert "structured-data" not in ids
    assert "headings" not in ids


def test_configured_discovery_feeds_opportunities(offline):
    client = MagicMock()
    client.chat.completions.create.side_effect = [
        SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="x"))],
            citations=["https://acme.io"] if i in (0, 2) else [],
        )
        for i in range(6)
    ]
    with patch("agents.query_agent.create_answer_engine_client", return_value=client), patch(
        "agents.query_agent.time.sleep"
    ):
        analysis = analyze_site("acme.io")

    assert [q.your_position for q in analysis.queries][:3] == ["cited", "not cited", "cited"]
    assert [o.query for o in analysis.opportunities] == [
        "Acme review",
        "how to use Acme",
        "is Acme worth it",
    ]


# --- report helpers ---


def test_opportunities_are_uncited_queries_in_order_capped_at_three():
    queries = [
        _query("q1", "cited"),
        _query("q2", "not cited"),
        _query("q3", "unknown"),
        _query("q4", "cited"),
        _query("q5", "not cited"),
        _query("q6", "not cited"),
    ]
    opportunities = build_opportunities(queries)
    assert [o.query for o in opportunities] == ["q2", "q3", "q5"]
    assert opportunities[0].suggested_action == 'Create or optimize content specifically targeting "q2"'
    assert opportunities[0].platform == "Perplexity"
    assert build_opportunities([_query("q1", "cited")]) == []


def test_raw_data_sums_across_pages():
    pages = [
        PageContent(
            url="https://acme.io",
            headings=[HeadingItem(level=1, text="A")],
            lists=["x", "y"],
            structured_data=[{"@type": "Organization"}],
            external_links=["a.org"],
            word_count=100,
        ),
        PageContent(
            url="https://acme.io/blog",
            headings=[HeadingItem(level=2, text="B"), HeadingItem(level=2, text="C")],
            structured_data=[{"@type": "Organization"}, {"@type": "BlogPosting"}],
            has_date=True,
            external_links=["a.org", "b.org"],
            word_count=250,
        ),
    ]
    raw = build_raw_data(pages)
    assert raw.pages_analyzed == 2
    assert raw.structured_data_found == ["Organization", "Organization", "BlogPosting"]
    assert raw.headings_count == 3
    assert raw.lists_count == 2
    assert raw.has_author_info is False
    assert raw.has_dates is True
    assert raw.word_count == 350
    assert raw.external_links_count == 3


# --- HTTP surface ---


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_analyze_site_endpoint_returns_camel_case_report(client, offline):
    resp = client.post("/api/analyze-site", json={"domain": "https://www.Acme.io/pricing"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["domain"] == "acme.io"
    assert body["score"]["breakdown"]["contentClarity"] == 28
    assert body["rawData"]["pagesAnalyzed"] == 0
    assert body["queries"][0]["yourPosition"] == "unknown"
    assert "suggestedAction" in body["opportunities"][0]


def test_analyze_site_endpoint_rejects_invalid_domain(client):
    resp = client.post("/api/analyze-site", json={"domain": "not a domain"})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid domain format"}
