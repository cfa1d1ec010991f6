"""Configuration and keyword tables."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Tuple

from dotenv import load_dotenv
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

TIMEZONE = os.getenv("TASKLINE_TIMEZONE", "Asia/Tokyo").strip()
try:
    ZoneInfo(TIMEZONE)
except (ZoneInfoNotFoundError, ValueError):
    _stderr_print(f"Unsupported TASKLINE_TIMEZONE={TIMEZONE!r}, falling back to 'Asia/Tokyo'")
    TIMEZONE = "Asia/Tokyo"

CONFIG = {
    "port": int(os.getenv("PORT", "3000")),
    "database_url": os.getenv("TASKLINE_DATABASE_URL", "sqlite:///taskline.db"),
    "timezone": TIMEZONE,
    # Confirmation reply after a task is created or completed
    "send_confirmations": os.getenv("TASKLINE_SEND_CONFIRMATIONS", "true").strip().lower()
    in ("1", "true", "yes", "on"),
    # Seconds before a claim held by a silent worker may be taken over
    "claim_timeout": int(os.getenv("TASKLINE_CLAIM_TIMEOUT", "600")),
    "extra_title_fillers": tuple(
        token.strip()
        for token in os.getenv("TASKLINE_EXTRA_TITLE_FILLERS", "").split(",")
        if token.strip()
    ),
}


def local_now() -> datetime:
    """Naive wall-clock time in the configured timezone."""
    return datetime.now(ZoneInfo(CONFIG["timezone"])).replace(tzinfo=None)


def local_today() -> date:
    return local_now().date()


# ── Keyword tables ──────────────────────────────────────────


@dataclass(frozen=True)
class KeywordConfig:
    """Static lookup tables used by the parser. Built once at import."""

    task_markers: Tuple[str, ...] = ("タスク", "やること", "TODO", "作業", "仕事", "タスクを", "やることを")
    completion: Tuple[str, ...] = ("完了", "終了", "done", "済み", "終わった", "できた")
    # "@" and "＠" are mention markers; the rest are explicit assignment words
    assignment: Tuple[str, ...] = ("お願い", "担当", "割り当て", "assign", "@", "＠")
    mention_markers: Tuple[str, ...] = ("@", "＠")
    priority_high: Tuple[str, ...] = ("緊急", "急ぎ", "重要", "至急", "最優先", "ASAP")
    priority_medium: Tuple[str, ...] = ("普通", "通常", "中程度")
    priority_low: Tuple[str, ...] = ("後で", "あとで", "低優先度", "暇な時")
    status: Tuple[str, ...] = ("状況", "ステータス", "進捗", "status", "確認")
    leading_particles: Tuple[str, ...] = ("を", "は", "が", "も")
    trailing_fillers: Tuple[str, ...] = ("である", "でした", "です", "ください", "だ")
    honorifics: Tuple[str, ...] = ("さん", "様", "くん", "ちゃん", "氏")
    # (phrase, offset in days from today)
    relative_days: Tuple[Tuple[str, int], ...] = (("明後日", 2), ("明日", 1), ("今日", 0), ("本日", 0))
    sentence_terminators: str = "。！？!?"

    @property
    def explicit_assignment(self) -> Tuple[str, ...]:
        return tuple(k for k in self.assignment if k not in self.mention_markers)


def build_keywords(extra_title_fillers: Tuple[str, ...] = ()) -> KeywordConfig:
    base = KeywordConfig()
    if not extra_title_fillers:
        return base
    fillers = base.trailing_fillers + tuple(
        f for f in extra_title_fillers if f not in base.trailing_fillers
    )
    return KeywordConfig(trailing_fillers=fillers)


KEYWORDS = build_keywords(CONFIG["extra_title_fillers"])


# ── Typed config ────────────────────────────────────────────


@dataclass
class AppConfig:
    """Typed view over CONFIG."""

    port: int = 3000
    database_url: str = "sqlite:///taskline.db"
    timezone: str = "Asia/Tokyo"
    send_confirmations: bool = True
    claim_timeout: int = 600
    extra_title_fillers: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            port=CONFIG["port"],
            database_url=CONFIG["database_url"],
            timezone=CONFIG["timezone"],
            send_confirmations=CONFIG["send_confirmations"],
            claim_timeout=CONFIG["claim_timeout"],
            extra_title_fillers=CONFIG["extra_title_fillers"],
        )
