# services/crawler.py

from __future__ import annotations

import logging
import re
from typing import List, Optional

import requests

from app.config import settings

logger = logging.getLogger(__name__)

_DOMAIN_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9-]*[a-z0-9])?)+$")


def clean_domain(raw: str) -> str:
    """
    ユーザー入力のドメインを正規化する。
    "https://www.Example.com/blog" → "example.com"
    """
    cleaned = raw.strip().lower()
    cleaned = re.sub(r"^https?://", "", cleaned)
    cleaned = re.sub(r"^www\.", "", cleaned)
    return cleaned.split("/")[0]


def is_valid_domain(domain: str) -> bool:
    return bool(_DOMAIN_RE.match(domain)) and len(domain) <= 253


def build_candidate_urls(domain: str) -> List[str]:
    """1ドメインあたりに取得する URL（固定の 4 件）。"""
    return [
        f"https://{domain}",
        f"https://{domain}/about",
        f"https://{domain}/blog",
        f"https://www.{domain}",
    ]


def fetch_html(url: str, timeout: Optional[float] = None) -> Optional[str]:
    """
    単純な GET だけのクロール。リトライはしない。

    失敗時（ステータス異常・通信エラー・タイムアウト・不正 URL）は例外を投げずに
    None を返す。呼び出し側は取得できたページだけで処理を続ける。
    """
    if timeout is None:
        timeout = settings.fetch_timeout_seconds

    headers = {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml",
    }

    try:
        resp = requests.get(url, headers=headers, timeout=timeout)
    except (requests.RequestException, ValueError) as e:
        logger.warning("[crawler] Request failed: url=%s error=%s", url, e)
        return None

    if not resp.ok:
        logger.warning("[crawler] Non-OK status: url=%s status=%s", url, resp.status_code)
        return None

    return resp.text
