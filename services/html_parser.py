# services/html_parser.py

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from models.site_models import HeadingItem, PageContent, type_names

logger = logging.getLogger(__name__)

# 段落サンプルの上限件数と、ノイズ扱いにする最小文字数
MAX_PARAGRAPHS = 20
MIN_PARAGRAPH_CHARS = 50

_HEADING_TAG_RE = re.compile(r"^h[1-6]$")
_AUTHOR_ATTR_RE = re.compile(r"author", re.I)
_DATE_TEXT_RE = re.compile(r"\b(?:published|updated|modified)\b.{0,60}?\b\d{4}\b", re.I)


def _meta_content(soup: BeautifulSoup, **attrs: Any) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = tag.get("content")
    return content.strip() if content else None


def _extract_headings(soup: BeautifulSoup) -> List[HeadingItem]:
    """h1〜h6 を文書順のフラットなリストとして生成する。"""
    items: List[HeadingItem] = []
    for tag in soup.find_all(_HEADING_TAG_RE):
        text = tag.get_text(" ", strip=True)
        if not text:
            continue
        items.append(HeadingItem(level=int(tag.name[1]), text=text))
    return items


def _own_text(tag: Tag) -> str:
    """
    tag 自身のテキスト。同名タグの子孫（閉じタグ省略でネストした <p> や <li>）の中身は含めない。
    html.parser は暗黙の終了タグを補わないため、<p>a<p>b は a の中に b が入った木になる。
    """
    parts = (s.strip() for s in tag.strings if s.find_parent(tag.name) is tag)
    return " ".join(p for p in parts if p)


def _extract_paragraphs(soup: BeautifulSoup) -> List[str]:
    paragraphs: List[str] = []
    for tag in soup.find_all("p"):
        text = _own_text(tag)
        if len(text) > MIN_PARAGRAPH_CHARS:
            paragraphs.append(text)
            if len(paragraphs) >= MAX_PARAGRAPHS:
                break
    return paragraphs


def _extract_list_items(soup: BeautifulSoup) -> List[str]:
    items = (_own_text(li) for li in soup.find_all("li"))
    return [t for t in items if t]


def _extract_structured_data(soup: BeautifulSoup) -> List[Dict[str, Any]]:
    """
    <script type="application/ld+json"> を全てパースする。
    - 配列ならば要素ごとに展開
    - @graph を持つ場合はその中身も展開
    - JSON として壊れているブロックは読み飛ばす
    """
    objects: List[Dict[str, Any]] = []
    for tag in soup.find_all("script", attrs={"type": re.compile(r"^application/ld\+json$", re.I)}):
        raw = tag.string or tag.get_text()
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            # 壊れた JSON や深すぎるネストはそのブロックだけ読み飛ばす
            logger.debug("[html_parser] Invalid JSON-LD skipped: %r", raw[:200])
            continue

        candidates = data if isinstance(data, list) else [data]
        for obj in candidates:
            if not isinstance(obj, dict):
                continue
            objects.append(obj)
            graph = obj.get("@graph")
            if isinstance(graph, list):
                objects.extend(g for g in graph if isinstance(g, dict))
    return objects


def _has_author(soup: BeautifulSoup, structured_data: List[Dict[str, Any]]) -> bool:
    if soup.find(attrs={"class": _AUTHOR_ATTR_RE}) or soup.find(attrs={"id": _AUTHOR_ATTR_RE}):
        return True
    if soup.find("meta", attrs={"name": re.compile(r"^author$", re.I)}):
        return True
    return any(d.get("author") or "Person" in type_names(d) for d in structured_data)


def _has_date(soup: BeautifulSoup, visible_text: str) -> bool:
    if soup.find("time", attrs={"datetime": True}):
        return True
    if soup.find("meta", attrs={"property": "article:published_time"}):
        return True
    return bool(_DATE_TEXT_RE.search(visible_text))


def _extract_external_links(soup: BeautifulSoup, url: str) -> List[str]:
    """ソースとホストが異なる http(s) リンクのホスト名（重複なし・出現順）。"""
    own_host = urlparse(url).hostname
    hosts: List[str] = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not re.match(r"^https?://", href, re.I):
            continue
        try:
            host = urlparse(href).hostname
        except ValueError:
            continue
        if host and host != own_host and host not in hosts:
            hosts.append(host)
    return hosts


def _extract_visible_text(soup: BeautifulSoup) -> str:
    """script/style を除去して表示テキストを抽出する（soup は破壊的に変更される）。"""
    for tag in soup(["script", "style"]):
        tag.decompose()
    text = soup.get_text(separator=" ", strip=True)
    return re.sub(r"\s+", " ", text)


def parse_html(url: str, html: str) -> PageContent:
    """
    HTML文字列を解析して PageContent を生成する。
    ※ ここではネットワークアクセスは行わない（fetch_html で取得済み前提）
    """
    soup = BeautifulSoup(html, "html.parser")

    title = soup.title.get_text(strip=True) if soup.title else ""
    description = _meta_content(soup, name=re.compile(r"^description$", re.I)) or ""

    headings = _extract_headings(soup)
    paragraphs = _extract_paragraphs(soup)
    lists = _extract_list_items(soup)
    structured_data = _extract_structured_data(soup)
    external_links = _extract_external_links(soup, url)
    last_modified = _meta_content(soup, property="article:modified_time")
    has_author = _has_author(soup, structured_data)

    # ここから先は soup から script/style が消える
    visible_text = _extract_visible_text(soup)
    has_date = _has_date(soup, visible_text)

    return PageContent(
        url=url,
        title=title,
        description=description,
        headings=headings,
        paragraphs=paragraphs,
        lists=lists,
        structured_data=structured_data,
        has_author=has_author,
        has_date=has_date,
        last_modified=last_modified,
        external_links=external_links,
        word_count=len(visible_text.split()),
    )
