# models/analysis_models.py

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


PriorityType = Literal["high", "medium", "low"]
PositionType = Literal["cited", "not cited", "unknown"]


class ReportModel(BaseModel):
    """
    レポート用モデルの共通ベース。
    - Python 側は snake_case、JSON 側は camelCase（contentClarity など）
    - 生成後は変更しない
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ScoreBreakdown(ReportModel):
    content_clarity: int = Field(..., ge=0, le=100)
    authority_signals: int = Field(..., ge=0, le=100)
    structured_data: int = Field(..., ge=0, le=100)
    citability: int = Field(..., ge=0, le=100)
    freshness: int = Field(..., ge=0, le=100)
    topical_depth: int = Field(..., ge=0, le=100)


class SiteScore(ReportModel):
    overall: int = Field(..., ge=0, le=100)
    breakdown: ScoreBreakdown
    grade: str
    summary: str


class Tip(ReportModel):
    """改善提案 1 件。id はルールごとに固定のキー。"""

    id: str
    category: str
    priority: PriorityType
    title: str
    description: str
    impact: str


class QueryResult(ReportModel):
    query: str
    search_volume: str
    your_position: PositionType
    opportunity: bool


class Opportunity(ReportModel):
    query: str
    platform: str
    suggested_action: str
    difficulty: str


class RawData(ReportModel):
    """診断用の生カウンタ（全ページ合算）。"""

    pages_analyzed: int = 0
    structured_data_found: List[str] = Field(default_factory=list)
    headings_count: int = 0
    lists_count: int = 0
    has_author_info: bool = False
    has_dates: bool = False
    word_count: int = 0
    external_links_count: int = 0


class SiteAnalysis(ReportModel):
    """analyze_site() の最終成果物。呼び出しごとに新しく作られる。"""

    domain: str
    score: SiteScore
    tips: List[Tip] = Field(default_factory=list, max_length=6)
    queries: List[QueryResult] = Field(default_factory=list)
    opportunities: List[Opportunity] = Field(default_factory=list, max_length=3)
    raw_data: RawData = Field(default_factory=RawData)
