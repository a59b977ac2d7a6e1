# models/site_models.py

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def type_names(item: Dict[str, Any]) -> List[str]:
    """JSON-LD オブジェクトの @type を文字列のリストにする（配列形式の @type も展開）。"""
    raw = item.get("@type")
    if isinstance(raw, str):
        return [raw] if raw else []
    if isinstance(raw, list):
        return [t for t in raw if isinstance(t, str) and t]
    return []


class HeadingItem(BaseModel):
    """
    見出し 1 件（h1〜h6）。
    - level: 見出しレベル (1〜6)
    - text: 見出しのテキスト
    """

    model_config = ConfigDict(frozen=True)

    level: int = Field(..., ge=1, le=6)
    text: str


class PageContent(BaseModel):
    """
    1ページ分の構造シグナル。
    HTML パーサが生成し、スコア計算・Tips 生成に渡す中間モデル。
    生成後は変更しない（frozen）。
    """

    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    description: str = ""

    # すべての見出しを文書順のフラットなリストとして保持
    headings: List[HeadingItem] = Field(default_factory=list)

    # 50 文字を超える段落のみ、先頭 20 件まで
    paragraphs: List[str] = Field(default_factory=list)
    lists: List[str] = Field(default_factory=list)

    # JSON-LD をパースしたもの（schema.org の形そのまま）
    structured_data: List[Dict[str, Any]] = Field(default_factory=list)

    has_author: bool = False
    has_date: bool = False
    last_modified: Optional[str] = None

    # 外部リンクのホスト名（重複なし・出現順）
    external_links: List[str] = Field(default_factory=list)
    word_count: int = 0

    def schema_types(self) -> List[str]:
        """structured_data に含まれる @type を文字列のリストで返す。"""
        return [t for item in self.structured_data for t in type_names(item)]
