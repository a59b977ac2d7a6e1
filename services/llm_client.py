# services/llm_client.py
from __future__ import annotations

import logging
from typing import Optional

from openai import OpenAI

from app.config import settings

logger = logging.getLogger(__name__)


def create_answer_engine_client() -> Optional[OpenAI]:
    """
    回答エンジン（Perplexity, OpenAI 互換 API）用のクライアントを作る。

    PERPLEXITY_API_KEY が未設定なら None を返す（= 未設定モード）。
    呼び出し側はそれを見てネットワークに出ずにフォールバックする。
    リトライはしない（max_retries=0）。
    """
    api_key = settings.perplexity_api_key
    if not api_key:
        logger.info("[llm_client] PERPLEXITY_API_KEY is not set. answer engine disabled")
        return None

    return OpenAI(
        api_key=api_key,
        base_url=settings.perplexity_base_url,
        timeout=settings.answer_engine_timeout_seconds,
        max_retries=0,
    )
