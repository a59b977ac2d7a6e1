# app/api/routes.py
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from app.graph.lg_workflow import analyze_site
from models.analysis_models import SiteAnalysis
from services.crawler import clean_domain, is_valid_domain

logger = logging.getLogger(__name__)

router = APIRouter()


# --------- Request モデル ---------


class AnalyzeSiteRequest(BaseModel):
    domain: str


# --------- エンドポイント ---------


@router.post("/analyze-site", response_model=SiteAnalysis)
def api_analyze_site(payload: AnalyzeSiteRequest) -> SiteAnalysis:
    """
    ドメインを受け取り、AI 回答エンジンからの引用されやすさを分析するメインAPI。

    1) 候補ページ取得 → PageContent
    2) 6 ディメンションのスコア計算
    3) 改善 Tips
    4) 回答エンジンでのクエリ調査
    """
    domain = clean_domain(payload.domain)
    if not is_valid_domain(domain):
        logger.info("[api.analyze-site] invalid domain input=%r", payload.domain)
        raise HTTPException(status_code=400, detail="Invalid domain format")

    logger.info("[api.analyze-site] start domain=%s", domain)
    analysis = analyze_site(domain)
    logger.info(
        "[api.analyze-site] done domain=%s overall=%s grade=%s",
        domain,
        analysis.score.overall,
        analysis.score.grade,
    )
    return analysis
