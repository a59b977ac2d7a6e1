# agents/parser_agent.py

from typing import List
import logging

from models.site_models import PageContent
from services.crawler import build_candidate_urls, fetch_html
from services.html_parser import parse_html

logger = logging.getLogger(__name__)


def parse_site_pages(domain: str) -> List[PageContent]:
    """
    ドメインの候補 URL（4 件）に対して HTML を取得し、PageContent に変換する。
    取得・解析に失敗した URL は読み飛ばす（0 件になってもエラーにはしない）。

    取得は 1 件ずつ直列に行う。各 PageContent は独立しているので、
    並列化してもスコアは変わらない。
    """
    pages: List[PageContent] = []

    for url in build_candidate_urls(domain):
        logger.info(f"[parser_agent] Fetching HTML: {url}")

        # ----- 1) HTML を取得 -----
        html = fetch_html(url)
        if html is None:
            continue

        # ----- 2) BeautifulSoup で構造化 -----
        try:
            page = parse_html(url, html)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"[parser_agent] Parse error for {url}: {e}", exc_info=True)
            continue

        pages.append(page)
        logger.info(
            f"[parser_agent] Parsed successfully: {url} "
            f"(words={page.word_count}, headings={len(page.headings)})"
        )

    if not pages:
        logger.warning(f"[parser_agent] Could not fetch any pages for {domain}")

    return pages
