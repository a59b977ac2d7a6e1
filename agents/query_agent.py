# agents/query_agent.py

from __future__ import annotations

import logging
import time
from typing import List

from openai import APIStatusError, OpenAI

from app.config import settings
from models.analysis_models import QueryResult
from services.llm_client import create_answer_engine_client

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "Answer briefly with sources."


def display_name(domain: str) -> str:
    """先頭ラベルの頭文字だけ大文字にする。例: acme.io → Acme"""
    name = domain.split(".")[0]
    return name[:1].upper() + name[1:]


def build_test_queries(domain: str) -> List[str]:
    """ドメイン名から固定 6 パターンの質問を作る。"""
    name = display_name(domain)
    return [
        f"What is {name}?",
        f"{name} review",
        f"best {name} alternatives",
        f"how to use {name}",
        f"is {name} worth it",
        f"{name} vs competitors",
    ]


def _unknown(query: str, search_volume: str) -> QueryResult:
    return QueryResult(
        query=query,
        search_volume=search_volume,
        your_position="unknown",
        opportunity=True,
    )


def _is_cited(domain: str, content: str, citations: List[str]) -> bool:
    domain_lower = domain.lower()
    if any(domain_lower in str(c).lower() for c in citations):
        return True
    return domain_lower in content.lower()


def _check_query(client: OpenAI, domain: str, query: str) -> QueryResult:
    """
    1 クエリ分を回答エンジンに投げ、ドメインが引用されているか判定する。
    失敗した場合もこのクエリだけ "unknown" にして返す（例外は外に出さない）。
    """
    try:
        response = client.chat.completions.create(
            model=settings.perplexity_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": query},
            ],
            extra_body={"return_citations": True},
        )
    except APIStatusError as e:
        logger.warning("[query_agent] Non-success status: query=%s status=%s", query, e.status_code)
        return _unknown(query, "medium")
    except Exception as e:  # noqa: BLE001
        logger.warning("[query_agent] Request failed: query=%s error=%s", query, e, exc_info=True)
        return _unknown(query, "medium")

    try:
        content = response.choices[0].message.content or ""
    except (AttributeError, IndexError) as e:
        logger.warning("[query_agent] Malformed response: query=%s error=%s", query, e)
        return _unknown(query, "medium")

    # citations は OpenAI のスキーマ外のトップレベル項目
    citations = getattr(response, "citations", None) or []
    if not isinstance(citations, list):
        citations = []

    cited = _is_cited(domain, content, citations)
    logger.info(
        "[query_agent] query=%s cited=%s citations=%d",
        query,
        cited,
        len(citations),
    )
    return QueryResult(
        query=query,
        search_volume="medium",
        your_position="cited" if cited else "not cited",
        opportunity=not cited,
    )


def discover_queries(domain: str) -> List[QueryResult]:
    """
    Query Discovery のメイン関数。

    優先順位:
    1. PERPLEXITY_API_KEY が無い → ネットワークに出ず、6 件とも "unknown" を返す
    2. ある → 1 件ずつ直列に問い合わせる（並列にはしない）
       呼び出しの間には必ず settings.query_delay_seconds の待ちを入れる
    """
    queries = build_test_queries(domain)
    client = create_answer_engine_client()

    # 1) 未設定モード
    if client is None:
        logger.info("[query_agent] mode=UNCONFIGURED domain=%s", domain)
        return [_unknown(q, "unknown") for q in queries]

    # 2) 設定済みモード
    logger.info("[query_agent] mode=CONFIGURED domain=%s model=%s", domain, settings.perplexity_model)
    results: List[QueryResult] = []
    for i, query in enumerate(queries):
        if i > 0:
            time.sleep(settings.query_delay_seconds)
        results.append(_check_query(client, domain, query))

    cited = sum(1 for r in results if r.your_position == "cited")
    logger.info("[query_agent] done domain=%s cited=%d/%d", domain, cited, len(results))
    return results
