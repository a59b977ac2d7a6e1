# app/config.py

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリ全体で使う設定クラス。
    .env から環境変数を読み込み、属性として参照できるようにする。
    """

    # ---------- Perplexity (回答エンジン) ----------
    # PERPLEXITY_API_KEY=pplx-xxxx... を .env に書く想定
    # 未設定でも動く（クエリ調査が "unknown" にフォールバックする）
    perplexity_api_key: str | None = None

    # モデル名を変えたい場合は .env に PERPLEXITY_MODEL=sonar-pro などと書く
    perplexity_model: str = "sonar"
    perplexity_base_url: str = "https://api.perplexity.ai"

    # 回答エンジン呼び出し 1 回あたりのタイムアウト（秒）
    answer_engine_timeout_seconds: float = 30.0

    # クエリ間に必ず入れる待ち時間（秒）。レート制限対策の下限 0.3 を下回る値は起動時にエラー
    query_delay_seconds: float = Field(0.3, ge=0.3)

    # ---------- クロール ----------
    fetch_timeout_seconds: float = 10.0
    user_agent: str = "aio-site-advisor/0.2 (GEO Analysis)"

    # ---------- ログ ----------
    log_level: str = "INFO"

    # ---------- Pydantic Settings 設定 ----------
    model_config = SettingsConfigDict(
        env_file=".env",            # .env を読む
        env_file_encoding="utf-8",
        extra="ignore",             # 定義外の環境変数があっても無視（エラーにしない）
    )


@lru_cache
def get_settings() -> Settings:
    """Settings をシングルトン的に使うためのヘルパ。"""
    return Settings()


# 他のモジュールからは `from app.config import settings` で利用
settings = get_settings()
