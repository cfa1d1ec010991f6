"""Reply text builders."""

from datetime import date, datetime

from taskline.domain.models import StatusSummary, Task
from taskline.domain.replies import (
    build_confirmation_message,
    build_status_message,
    format_due_date,
)


def make_task(**overrides) -> Task:
    values = dict(id=1, workspace_id=1, title="会場設営", priority="high", status="pending")
    values.update(overrides)
    return Task(**values)


def test_status_message_exact():
    summary = StatusSummary(pending=3, in_progress=1, completed=4, overdue=2)
    assert build_status_message(summary) == (
        "📊 タスク状況\n⏳ 待機中: 3件\n🔄 進行中: 1件\n✅ 完了: 4件\n⚠️ 期限切れ: 2件"
    )


def test_format_due_date():
    assert format_due_date(make_task()) == "未設定"
    assert format_due_date(make_task(due_date=date(2025, 6, 11))) == "2025年06月11日"


class TestConfirmation:
    def test_creation(self):
        text = build_confirmation_message("task_creation", make_task(), assignee_name="田中")
        assert text.splitlines()[0] == "✅ タスクを作成しました"
        assert "📅 期限：未設定" in text
        assert "👤 担当者：田中" in text
        assert "⚠️ 優先度：高" in text
        assert "📊 ステータス：待機中" in text

    def test_completion_uses_completed_at(self):
        task = make_task(status="completed", completed_at=datetime(2025, 6, 10, 18, 5))
        text = build_confirmation_message("task_completion", task)
        assert "👤 完了者：未設定" in text
        assert "🕐 完了時刻：2025年06月10日 18:05" in text

    def test_completion_falls_back_to_now(self):
        text = build_confirmation_message("task_completion", make_task(), now=datetime(2025, 6, 10, 7, 0))
        assert "2025年06月10日 07:00" in text

    def test_assignment(self):
        text = build_confirmation_message(
            "task_assignment", make_task(due_date=date(2025, 6, 12)), assignee_name="佐藤"
        )
        assert text.startswith("📝 タスクが割り当てられました")
        assert "📅 期限：2025年06月12日" in text

    def test_other_intent(self):
        assert build_confirmation_message("general_message", make_task()) == "📋 メッセージを処理しました"
