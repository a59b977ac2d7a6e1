"""Query discovery and answer-engine client tests."""

from types import SimpleNamespace
from unittest.mock import MagicMock, call, patch

import httpx
import pytest
from openai import APIStatusError

from agents.query_agent import build_test_queries, discover_queries, display_name
from app.config import settings
from services.llm_client import create_answer_engine_client


def _completion(content: str, citations=None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        citations=citations if citations is not None else [],
    )


def _status_error(status: int) -> APIStatusError:
    request = httpx.Request("POST", "https://api.perplexity.ai/chat/completions")
    response = httpx.Response(status, request=request)
    return APIStatusError("rate limited", response=response, body=None)


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setattr(settings, "perplexity_api_key", "pplx-test")
    client = MagicMock()
    with patch("agents.query_agent.create_answer_engine_client", return_value=client), patch(
        "agents.query_agent.time.sleep"
    ) as mock_sleep:
        yield client, mock_sleep


# --- query templates ---


def test_display_name_capitalizes_first_label():
    assert display_name("acme.io") == "Acme"
    assert display_name("openAI.com") == "OpenAI"


def test_build_test_queries_six_fixed_templates():
    assert build_test_queries("acme.io") == [
        "What is Acme?",
        "Acme review",
        "best Acme alternatives",
        "how to use Acme",
        "is Acme worth it",
        "Acme vs competitors",
    ]


# --- unconfigured mode ---


def test_unconfigured_returns_unknown_without_network():
    with patch("services.llm_client.OpenAI") as mock_openai, patch("agents.query_agent.time.sleep") as mock_sleep:
        results = discover_queries("acme.io")

    mock_openai.assert_not_called()
    mock_sleep.assert_not_called()
    assert len(results) == 6
    for r in results:
        assert r.your_position == "unknown"
        assert r.search_volume == "unknown"
        assert r.opportunity is True


def test_client_factory_returns_none_without_key():
    assert create_answer_engine_client() is None


def test_client_factory_disables_retries_and_sets_timeout(monkeypatch):
    monkeypatch.setattr(settings, "perplexity_api_key", "pplx-test")
    client = create_answer_engine_client()
    assert client is not None
    assert client.max_retries == 0
    assert client.timeout == settings.answer_engine_timeout_seconds
    assert "api.perplexity.ai" in str(client.base_url)


# --- configured mode ---


def test_cited_via_citations_and_answer_text(configured):
    client, _ = configured
    client.chat.completions.create.side_effect = [
        _completion("Acme makes widgets.", citations=["https://www.ACME.io/about"]),
        _completion("According to acme.io, the product is solid."),
        _completion("Try Globex or Initech instead.", citations=["https://globex.com"]),
        _completion("See the docs."),
        _completion("It depends."),
        _completion("Comparison table below."),
    ]

    results = discover_queries("acme.io")

    assert [r.your_position for r in results] == [
        "cited",
        "cited",
        "not cited",
        "not cited",
        "not cited",
        "not cited",
    ]
    assert [r.opportunity for r in results] == [False, False, True, True, True, True]
    assert all(r.search_volume == "medium" for r in results)


def test_request_shape(configured):
    client, _ = configured
    client.chat.completions.create.return_value = _completion("nothing")

    discover_queries("acme.io")

    _, kwargs = client.chat.completions.create.call_args_list[0]
    assert kwargs["model"] == settings.perplexity_model
    assert kwargs["messages"] == [
        {"role": "system", "content": "Answer briefly with sources."},
        {"role": "user", "content": "What is Acme?"},
    ]
    assert kwargs["extra_body"] == {"return_citations": True}


def test_calls_are_sequential_with_delay_between_each(configured):
    client, mock_sleep = configured
    client.chat.completions.create.return_value = _completion("nothing")

    discover_queries("acme.io")

    assert client.chat.completions.create.call_count == 6
    assert mock_sleep.call_args_list == [call(settings.query_delay_seconds)] * 5


def test_failed_query_does_not_abort_batch(configured):
    client, mock_sleep = configured
    client.chat.completions.create.side_effect = [
        _status_error(429),
        httpx.ConnectTimeout("timed out"),
        _completion("acme.io is great"),
        _completion("", citations=None),
        SimpleNamespace(choices=[]),
        _completion("no mention"),
    ]

    results = discover_queries("acme.io")

    assert len(results) == 6
    assert results[0].your_position == "unknown"
    assert results[0].search_volume == "medium"
    assert results[0].opportunity is True
    assert results[1].your_position == "unknown"
    assert results[2].your_position == "cited"
    assert results[3].your_position == "not cited"
    assert results[4].your_position == "unknown"
    assert results[5].your_position == "not cited"
    # delay applies after failures too
    assert mock_sleep.call_count == 5
