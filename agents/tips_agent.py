# agents/tips_agent.py

from __future__ import annotations

import logging
from typing import List

from agents.scoring_agent import STAT_PATTERN, round_half_up
from models.analysis_models import ScoreBreakdown, Tip
from models.site_models import PageContent

logger = logging.getLogger(__name__)

MAX_TIPS = 6

# 各ルールの発火しきい値（スコアがこれ未満なら Tip を出す）
STRUCTURED_DATA_THRESHOLD = 60
CONTENT_CLARITY_THRESHOLD = 65
AUTHORITY_THRESHOLD = 60
CITABILITY_THRESHOLD = 70
FRESHNESS_THRESHOLD = 55
TOPICAL_DEPTH_THRESHOLD = 60

MIN_AVG_HEADINGS = 4
MIN_AVG_LISTS = 2
MIN_AVG_EXTERNAL_LINKS = 3
MIN_AVG_WORDS = 1000

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def _per_page(total: float, pages: List[PageContent]) -> float:
    return total / max(len(pages), 1)


def _structured_data_tip(pages: List[PageContent]) -> Tip:
    if any(p.structured_data for p in pages):
        return Tip(
            id="structured-data",
            category="Technical",
            priority="high",
            title="Enhance Your Structured Data",
            description=(
                "You have some structured data, but adding FAQ or HowTo schema would "
                "significantly improve AI understanding."
            ),
            impact="+15-25 potential score increase",
        )
    return Tip(
        id="structured-data",
        category="Technical",
        priority="high",
        title="Add Structured Data Markup",
        description=(
            "No JSON-LD structured data found. Adding schema.org markup helps AI "
            "understand and cite your content."
        ),
        impact="+15-25 potential score increase",
    )


def _freshness_tip(pages: List[PageContent]) -> Tip:
    if any(p.has_date for p in pages):
        return Tip(
            id="freshness",
            category="Maintenance",
            priority="medium",
            title="Update Content More Frequently",
            description="Your content may be outdated. AI prefers recent information - update key pages quarterly.",
            impact="+10-15 potential score increase",
        )
    return Tip(
        id="freshness",
        category="Maintenance",
        priority="high",
        title="Add Publication Dates",
        description="No publication dates found. Add 'Published' and 'Last Updated' dates to signal content freshness.",
        impact="+10-15 potential score increase",
    )


def generate_tips(breakdown: ScoreBreakdown, pages: List[PageContent]) -> List[Tip]:
    """
    スコア内訳とページ群から改善 Tips を生成する。

    ルールは上から順に評価し、それぞれ 0 件か 1 件の Tip を出す。
    最後に priority（high → medium → low）で安定ソートし、先頭 MAX_TIPS 件を返す。
    """
    tips: List[Tip] = []

    avg_headings = _per_page(sum(len(p.headings) for p in pages), pages)
    avg_lists = _per_page(sum(len(p.lists) for p in pages), pages)
    avg_links = _per_page(sum(len(p.external_links) for p in pages), pages)
    avg_words = _per_page(sum(p.word_count for p in pages), pages)

    # ----- 1) 構造化データ -----
    if breakdown.structured_data < STRUCTURED_DATA_THRESHOLD:
        tips.append(_structured_data_tip(pages))

    # ----- 2) 見出し・リスト -----
    if breakdown.content_clarity < CONTENT_CLARITY_THRESHOLD:
        if avg_headings < MIN_AVG_HEADINGS:
            tips.append(
                Tip(
                    id="headings",
                    category="Content Structure",
                    priority="high",
                    title="Add More Descriptive Headings",
                    description=(
                        f"Your pages average only {round_half_up(avg_headings)} headings. AI extracts information "
                        "from heading structure - use H2s and H3s to break up content into clear sections."
                    ),
                    impact="+10-15 potential score increase",
                )
            )
        if avg_lists < MIN_AVG_LISTS:
            tips.append(
                Tip(
                    id="lists",
                    category="Content Structure",
                    priority="medium",
                    title="Use Bullet Points and Lists",
                    description=(
                        "AI loves lists! They're easy to extract and cite. Convert paragraphs with "
                        "multiple points into bulleted or numbered lists."
                    ),
                    impact="+8-12 potential score increase",
                )
            )

    # ----- 3) 著者・引用元 -----
    if breakdown.authority_signals < AUTHORITY_THRESHOLD:
        if not any(p.has_author for p in pages):
            tips.append(
                Tip(
                    id="author",
                    category="Authority",
                    priority="high",
                    title="Add Author Information",
                    description=(
                        "No author information detected. Adding author bios with credentials "
                        "significantly increases trust and citability."
                    ),
                    impact="+10-15 potential score increase",
                )
            )
        if avg_links < MIN_AVG_EXTERNAL_LINKS:
            tips.append(
                Tip(
                    id="citations",
                    category="Authority",
                    priority="medium",
                    title="Cite Authoritative Sources",
                    description=(
                        "Link to reputable sources (.gov, .edu, research papers) to build credibility. "
                        "AI values well-sourced content."
                    ),
                    impact="+8-12 potential score increase",
                )
            )

    # ----- 4) 引用されやすさ -----
    if breakdown.citability < CITABILITY_THRESHOLD:
        has_stats = any(STAT_PATTERN.search(para) for p in pages for para in p.paragraphs)
        if not has_stats:
            tips.append(
                Tip(
                    id="statistics",
                    category="Content",
                    priority="medium",
                    title="Add Statistics and Data Points",
                    description=(
                        "Include specific numbers, percentages, and data. AI frequently cites "
                        "content with concrete statistics."
                    ),
                    impact="+10-15 potential score increase",
                )
            )
        tips.append(
            Tip(
                id="quotable",
                category="Content",
                priority="medium",
                title="Create Quotable Statements",
                description=(
                    "Add clear, concise statements that AI can easily extract and quote. "
                    "Think 'tweetable' insights."
                ),
                impact="+8-12 potential score increase",
            )
        )

    # ----- 5) 鮮度 -----
    if breakdown.freshness < FRESHNESS_THRESHOLD:
        tips.append(_freshness_tip(pages))

    # ----- 6) 網羅性 -----
    if breakdown.topical_depth < TOPICAL_DEPTH_THRESHOLD and avg_words < MIN_AVG_WORDS:
        tips.append(
            Tip(
                id="depth",
                category="Content",
                priority="medium",
                title="Expand Content Depth",
                description=(
                    f"Your pages average {round_half_up(avg_words)} words. For comprehensive coverage that AI "
                    "cites, aim for 1,500-2,500 words on key topics."
                ),
                impact="+10-15 potential score increase",
            )
        )

    # sorted() は安定ソートなので、同じ priority 内はルールの評価順のまま
    tips = sorted(tips, key=lambda t: _PRIORITY_ORDER[t.priority])[:MAX_TIPS]

    logger.info("[tips] generated=%d ids=%s", len(tips), [t.id for t in tips])
    return tips
