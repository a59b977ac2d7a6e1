# app/graph/nodes.py
from __future__ import annotations

import logging
from typing import List

from app.graph.lg_state import GraphState
from agents.parser_agent import parse_site_pages
from agents.scoring_agent import build_site_score
from agents.tips_agent import generate_tips
from agents.query_agent import discover_queries

from models.analysis_models import (
    Opportunity,
    QueryResult,
    RawData,
    SiteAnalysis,
    SiteScore,
    Tip,
)
from models.site_models import PageContent
from services.crawler import clean_domain

logger = logging.getLogger(__name__)

MAX_OPPORTUNITIES = 3
OPPORTUNITY_PLATFORM = "Perplexity"


def _log_progress(state: GraphState, node: str, message: str) -> GraphState:
    """
    進捗ログを state に積むユーティリティ。
    state は dict (GraphState) として扱う。
    """
    line = f"[{node}] {message}"

    messages: List[str] = list(state.get("progress_messages", []))
    messages.append(line)

    state["progress_messages"] = messages
    state["current_node"] = node

    logger.info(line)
    return state


# ---------- Fetch ノード ----------


def fetch_node(state: GraphState) -> GraphState:
    """
    Fetch ノード:
    ドメインを正規化し、候補 URL の HTML を取得して PageContent に変換する。
    """
    state = _log_progress(state, "fetch", "start: fetching candidate pages")

    domain = clean_domain(state["domain"])
    state["domain"] = domain

    pages = parse_site_pages(domain)
    state["pages"] = pages

    state = _log_progress(state, "fetch", f"done: {len(pages)} pages analyzed for {domain}")
    return state


# ---------- Scoring ノード ----------


def scoring_node(state: GraphState) -> GraphState:
    state = _log_progress(state, "scoring", "start: calculating scores")

    pages: List[PageContent] = state.get("pages", [])
    score = build_site_score(pages)
    state["score"] = score

    state = _log_progress(state, "scoring", f"done: overall={score.overall} grade={score.grade}")
    return state


# ---------- Tips ノード ----------


def tips_node(state: GraphState) -> GraphState:
    state = _log_progress(state, "tips", "start: generating tips")

    score: SiteScore = state["score"]
    tips = generate_tips(score.breakdown, state.get("pages", []))
    state["tips"] = tips

    state = _log_progress(state, "tips", f"done: {len(tips)} tips")
    return state


# ---------- Query ノード ----------


def query_node(state: GraphState) -> GraphState:
    """
    Query ノード:
    ページ取得結果とは独立に、回答エンジンへテスト質問を投げる。
    """
    state = _log_progress(state, "query", "start: discovering queries")

    queries = discover_queries(state["domain"])
    state["queries"] = queries

    cited = sum(1 for q in queries if q.your_position == "cited")
    state = _log_progress(state, "query", f"done: cited in {cited}/{len(queries)} queries")
    return state


# ---------- Report ノード ----------


def build_opportunities(queries: List[QueryResult]) -> List[Opportunity]:
    """引用されていないクエリを元の順番のまま先頭 3 件まで施策に変換する。"""
    return [
        Opportunity(
            query=q.query,
            platform=OPPORTUNITY_PLATFORM,
            suggested_action=f'Create or optimize content specifically targeting "{q.query}"',
            difficulty="medium",
        )
        for q in queries
        if q.your_position != "cited"
    ][:MAX_OPPORTUNITIES]


def build_raw_data(pages: List[PageContent]) -> RawData:
    return RawData(
        pages_analyzed=len(pages),
        structured_data_found=[t for p in pages for t in p.schema_types()],
        headings_count=sum(len(p.headings) for p in pages),
        lists_count=sum(len(p.lists) for p in pages),
        has_author_info=any(p.has_author for p in pages),
        has_dates=any(p.has_date for p in pages),
        word_count=sum(p.word_count for p in pages),
        external_links_count=sum(len(p.external_links) for p in pages),
    )


def report_node(state: GraphState) -> GraphState:
    """
    Report ノード:
    ここまでの結果をまとめて SiteAnalysis を組み立てる。
    """
    state = _log_progress(state, "report", "start: assembling report")

    queries: List[QueryResult] = state.get("queries", [])
    tips: List[Tip] = state.get("tips", [])

    state["analysis"] = SiteAnalysis(
        domain=state["domain"],
        score=state["score"],
        tips=tips,
        queries=queries,
        opportunities=build_opportunities(queries),
        raw_data=build_raw_data(state.get("pages", [])),
    )

    state = _log_progress(state, "report", "done: report assembled")
    return state
