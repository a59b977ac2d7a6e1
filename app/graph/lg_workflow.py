# app/graph/lg_workflow.py
from __future__ import annotations

import logging

from app.graph.lg_state import GraphState, create_initial_state
from app.graph import nodes
from models.analysis_models import SiteAnalysis

logger = logging.getLogger(__name__)


def run_workflow(domain: str) -> GraphState:
    """
    サイト分析のシンプルな直列ワークフロー。

    fetch → scoring → tips → query → report
    """
    logger.info("[lg_workflow] run_workflow start domain=%s", domain)

    state = create_initial_state(domain=domain)

    # 1) 候補 URL の取得 → PageContent
    state = nodes.fetch_node(state)

    # 2) 6 ディメンションのスコア・総合スコア・評価
    state = nodes.scoring_node(state)

    # 3) スコア内訳から改善 Tips
    state = nodes.tips_node(state)

    # 4) 回答エンジンでのクエリ調査（キー未設定なら unknown）
    state = nodes.query_node(state)

    # 5) レポート組み立て
    state = nodes.report_node(state)

    logger.info(
        "[lg_workflow] run_workflow done domain=%s current_node=%s",
        state["domain"],
        state.get("current_node"),
    )
    return state


def analyze_site(domain: str) -> SiteAnalysis:
    """
    唯一の公開エントリポイント。ドメインを受け取り SiteAnalysis を返す。

    ページ取得や回答エンジンの失敗は各コンポーネント内で吸収されるので、
    全ページ取得不可・API キー未設定でも低スコアのレポートが返る。
    """
    state = run_workflow(domain)
    return state["analysis"]
