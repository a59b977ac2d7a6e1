# agents/scoring_agent.py

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from models.analysis_models import ScoreBreakdown, SiteScore
from models.site_models import PageContent

logger = logging.getLogger(__name__)

# ============================================================
# チューニング用パラメータ
# ============================================================
# いずれも経験的に決めた値。ディメンションごとにまとめて置いておく。

# ページが 1 件も取れなかったときの固定スコア
ZERO_PAGE_BASELINE: Dict[str, int] = {
    "content_clarity": 28,
    "authority_signals": 25,
    "structured_data": 15,
    "citability": 22,
    "freshness": 20,
    "topical_depth": 18,
}

# 総合スコアの重み（合計 1.0）
OVERALL_WEIGHTS: Dict[str, float] = {
    "content_clarity": 0.20,
    "authority_signals": 0.15,
    "structured_data": 0.20,
    "citability": 0.25,
    "freshness": 0.10,
    "topical_depth": 0.10,
}

# ---------- contentClarity ----------
CLARITY_BASELINE = 18
CLARITY_HEADINGS_HALF, CLARITY_HEADINGS_MAX = 4, 28
CLARITY_LISTS_HALF, CLARITY_LISTS_MAX = 2.5, 18
CLARITY_WORDS_MAX = 22
CLARITY_STRUCTURE_BONUS = 14

# ---------- authoritySignals ----------
AUTHORITY_BASELINE = 20
AUTHORITY_AUTHOR_BONUS = 22
AUTHORITY_LINKS_HALF, AUTHORITY_LINKS_MAX = 3, 23
AUTHORITY_TRUSTED_HALF, AUTHORITY_TRUSTED_MAX = 2, 18
AUTHORITY_AUTHOR_FRACTION_MAX = 17

AUTHORITY_DOMAIN_SUFFIXES = (".gov", ".edu")
AUTHORITY_DOMAIN_KEYWORDS = (
    "wikipedia",
    "reuters",
    "nytimes",
    "harvard",
    "stanford",
    "nature.com",
    "sciencedirect",
)

# ---------- structuredData ----------
SCHEMA_BASELINE = 12
SCHEMA_PRESENT_BONUS = 30
SCHEMA_TYPES_HALF, SCHEMA_TYPES_MAX = 15, 48
SCHEMA_DEFAULT_TYPE_POINTS = 3
SCHEMA_TYPE_POINTS: Dict[str, int] = {
    "Article": 10,
    "BlogPosting": 10,
    "FAQPage": 12,
    "HowTo": 9,
    "Organization": 8,
    "Person": 7,
    "Product": 8,
    "Review": 6,
    "WebPage": 4,
    "BreadcrumbList": 5,
    "LocalBusiness": 9,
}

# ---------- citability ----------
CITABILITY_BASELINE = 15
CITABILITY_STATS_HALF, CITABILITY_STATS_MAX = 4, 22
CITABILITY_LISTS_HALF, CITABILITY_LISTS_MAX = 6, 16
CITABILITY_TITLE_HALF, CITABILITY_TITLE_MAX = 40, 10
CITABILITY_DESC_HALF, CITABILITY_DESC_MAX = 120, 10
CITABILITY_WORDS_MAX = 17
CITABILITY_INSIGHT_BONUS = 10
CITABILITY_INSIGHT_MIN_LISTS = 3

# ---------- freshness ----------
FRESHNESS_BASELINE = 15
FRESHNESS_DATES_BONUS = 18
FRESHNESS_DECAY_MAX = 42
FRESHNESS_DECAY_DAYS = 180
FRESHNESS_RECENT_DAYS = 120
FRESHNESS_RECENT_HALF, FRESHNESS_RECENT_MAX = 2, 12
FRESHNESS_UNPARSED_BONUS = 13

# ---------- topicalDepth ----------
DEPTH_BASELINE = 12
DEPTH_WORDS_MAX = 25
DEPTH_PAGES_HALF, DEPTH_PAGES_MAX = 2, 22
DEPTH_H2_HALF, DEPTH_H2_MAX = 6, 24
DEPTH_PARAGRAPHS_HALF, DEPTH_PARAGRAPHS_MAX = 10, 17

# 統計値っぽい記述（%、金額、million など）
STAT_PATTERN = re.compile(r"\d+%|\$[\d,]+|\d+\s*(?:million|billion|thousand|percent)", re.I)

# 評価と要約文（上から順に判定）
GRADE_THRESHOLDS = [
    (90, "A+"),
    (80, "A"),
    (72, "B+"),
    (65, "B"),
    (57, "C+"),
    (50, "C"),
    (40, "D+"),
]
LOWEST_GRADE = "D"


# ============================================================
# 曲線ユーティリティ
# ============================================================

def smooth_scale(value: float, half_point: float, max_output: float) -> float:
    """
    逓減カーブ max_output * value / (value + half_point)。
    value == half_point のとき max_output の半分になる。
    """
    if value <= 0:
        return 0.0
    return max_output * (value / (value + half_point))


def word_count_score(word_count: float, max_points: float) -> float:
    """
    語数カーブ。1000〜2500 語あたりで満点に近づき、
    100 語未満は大きく減点、5000 語超はゆるやかに減衰（下限 70%）。
    """
    wc = word_count
    if wc < 100:
        return max_points * (wc / 100) * 0.15
    if wc < 500:
        return max_points * 0.15 + max_points * 0.35 * ((wc - 100) / 400)
    if wc <= 2500:
        return max_points * 0.5 + max_points * 0.5 * ((wc - 500) / 2000)
    if wc <= 5000:
        return max_points
    return max_points * max(0.7, 1 - (wc - 5000) / 20000)


def freshness_decay(days_since: float, max_points: float) -> float:
    """0 日 → 満点、90 日 → 約 60%、365 日 → 約 13%。"""
    if days_since <= 0:
        return max_points
    return max_points * math.exp(-days_since / FRESHNESS_DECAY_DAYS)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def _average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def is_authority_domain(host: str) -> bool:
    return host.endswith(AUTHORITY_DOMAIN_SUFFIXES) or any(k in host for k in AUTHORITY_DOMAIN_KEYWORDS)


def count_stat_paragraphs(pages: List[PageContent]) -> int:
    return sum(1 for p in pages for para in p.paragraphs if STAT_PATTERN.search(para))


def _parse_timestamp(raw: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _has_good_structure(page: PageContent) -> bool:
    """h1 があり、その後ろに h2 が出てくるか。"""
    levels = [h.level for h in page.headings]
    if 1 not in levels or 2 not in levels:
        return False
    return levels.index(2) > levels.index(1)


# ============================================================
# ディメンション別スコア
# ============================================================

def _content_clarity(pages: List[PageContent], avg_words: float) -> int:
    avg_headings = _average([len(p.headings) for p in pages])
    avg_lists = _average([len(p.lists) for p in pages])

    score = CLARITY_BASELINE
    score += smooth_scale(avg_headings, CLARITY_HEADINGS_HALF, CLARITY_HEADINGS_MAX)
    score += smooth_scale(avg_lists, CLARITY_LISTS_HALF, CLARITY_LISTS_MAX)
    score += word_count_score(avg_words, CLARITY_WORDS_MAX)
    if any(_has_good_structure(p) for p in pages):
        score += CLARITY_STRUCTURE_BONUS
    return _clamp(score)


def _authority_signals(pages: List[PageContent]) -> int:
    avg_links = _average([len(p.external_links) for p in pages])
    trusted_links = sum(1 for p in pages for host in p.external_links if is_authority_domain(host))
    author_fraction = sum(1 for p in pages if p.has_author) / len(pages)

    score = AUTHORITY_BASELINE
    if author_fraction > 0:
        score += AUTHORITY_AUTHOR_BONUS
    score += smooth_scale(avg_links, AUTHORITY_LINKS_HALF, AUTHORITY_LINKS_MAX)
    score += smooth_scale(trusted_links, AUTHORITY_TRUSTED_HALF, AUTHORITY_TRUSTED_MAX)
    score += round_half_up(author_fraction * AUTHORITY_AUTHOR_FRACTION_MAX)
    return _clamp(score)


def _structured_data(pages: List[PageContent]) -> int:
    score = SCHEMA_BASELINE
    if any(p.structured_data for p in pages):
        score += SCHEMA_PRESENT_BONUS
        unique_types = {t for p in pages for t in p.schema_types()}
        type_bonus = sum(SCHEMA_TYPE_POINTS.get(t, SCHEMA_DEFAULT_TYPE_POINTS) for t in unique_types)
        score += round_half_up(smooth_scale(type_bonus, SCHEMA_TYPES_HALF, SCHEMA_TYPES_MAX))
    return _clamp(score)


def _citability(pages: List[PageContent], avg_words: float) -> int:
    stats_count = count_stat_paragraphs(pages)
    total_lists = sum(len(p.lists) for p in pages)
    best_title = max(len(p.title) for p in pages)
    best_desc = max(len(p.description) for p in pages)

    score = CITABILITY_BASELINE
    score += smooth_scale(stats_count, CITABILITY_STATS_HALF, CITABILITY_STATS_MAX)
    score += smooth_scale(total_lists, CITABILITY_LISTS_HALF, CITABILITY_LISTS_MAX)
    score += smooth_scale(best_title, CITABILITY_TITLE_HALF, CITABILITY_TITLE_MAX)
    score += smooth_scale(best_desc, CITABILITY_DESC_HALF, CITABILITY_DESC_MAX)
    score += word_count_score(avg_words, CITABILITY_WORDS_MAX)
    if stats_count > 0 and total_lists > CITABILITY_INSIGHT_MIN_LISTS:
        score += CITABILITY_INSIGHT_BONUS
    return _clamp(score)


def _freshness(pages: List[PageContent], now: datetime) -> int:
    has_dates = any(p.has_date for p in pages)

    days_since: List[float] = []
    for p in pages:
        if not p.last_modified:
            continue
        modified = _parse_timestamp(p.last_modified)
        if modified is None:
            logger.debug("[scoring] Unparseable modified date: url=%s value=%s", p.url, p.last_modified)
            continue
        days_since.append((now - modified).total_seconds() / 86400)

    score = FRESHNESS_BASELINE
    if has_dates:
        score += FRESHNESS_DATES_BONUS

    if days_since:
        score += freshness_decay(min(days_since), FRESHNESS_DECAY_MAX)
        recent = sum(1 for d in days_since if d < FRESHNESS_RECENT_DAYS)
        score += smooth_scale(recent, FRESHNESS_RECENT_HALF, FRESHNESS_RECENT_MAX)
    elif has_dates:
        score += FRESHNESS_UNPARSED_BONUS
    return _clamp(score)


def _topical_depth(pages: List[PageContent], avg_words: float) -> int:
    unique_h2 = {h.text.lower() for p in pages for h in p.headings if h.level == 2}
    avg_paragraphs = _average([len(p.paragraphs) for p in pages])

    score = DEPTH_BASELINE
    score += word_count_score(avg_words, DEPTH_WORDS_MAX)
    score += smooth_scale(len(pages), DEPTH_PAGES_HALF, DEPTH_PAGES_MAX)
    score += smooth_scale(len(unique_h2), DEPTH_H2_HALF, DEPTH_H2_MAX)
    score += smooth_scale(avg_paragraphs, DEPTH_PARAGRAPHS_HALF, DEPTH_PARAGRAPHS_MAX)
    return _clamp(score)


# ============================================================
# 公開関数
# ============================================================

def calculate_scores(pages: List[PageContent], now: Optional[datetime] = None) -> ScoreBreakdown:
    """
    ページ群から 6 ディメンションのスコア（0〜100）を計算する。
    ページが 0 件でもエラーにはせず、固定のベースラインを返す。
    """
    if not pages:
        return ScoreBreakdown(**ZERO_PAGE_BASELINE)

    now = now or datetime.now(timezone.utc)
    avg_words = _average([p.word_count for p in pages])

    return ScoreBreakdown(
        content_clarity=_content_clarity(pages, avg_words),
        authority_signals=_authority_signals(pages),
        structured_data=_structured_data(pages),
        citability=_citability(pages, avg_words),
        freshness=_freshness(pages, now),
        topical_depth=_topical_depth(pages, avg_words),
    )


def calculate_overall(breakdown: ScoreBreakdown) -> int:
    total = sum(getattr(breakdown, name) * weight for name, weight in OVERALL_WEIGHTS.items())
    return _clamp(total)


def grade_for(overall: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if overall >= threshold:
            return grade
    return LOWEST_GRADE


def summary_for(overall: int) -> str:
    if overall >= 80:
        return (
            f"Your site scores {overall}/100 for AI visibility. Strong across most dimensions "
            "- focus on maintaining freshness and expanding citability."
        )
    if overall >= 65:
        return (
            f"Your site scores {overall}/100. Good foundation with clear opportunities "
            "- the tips below could push you above 80."
        )
    if overall >= 50:
        return (
            f"Your site scores {overall}/100. AI systems have limited signals to cite you "
            "- prioritize the high-impact tips below."
        )
    return (
        f"Your site scores {overall}/100. Significant room for improvement "
        "- start with structured data and content depth."
    )


def build_site_score(pages: List[PageContent], now: Optional[datetime] = None) -> SiteScore:
    breakdown = calculate_scores(pages, now=now)
    overall = calculate_overall(breakdown)
    grade = grade_for(overall)

    logger.info(
        "[scoring] pages=%d overall=%d grade=%s breakdown=%s",
        len(pages),
        overall,
        grade,
        breakdown.model_dump(),
    )

    return SiteScore(
        overall=overall,
        breakdown=breakdown,
        grade=grade,
        summary=summary_for(overall),
    )
