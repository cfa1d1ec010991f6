"""Reply text sent back into the chat channel."""

from datetime import datetime
from typing import Optional

from taskline.domain.models import (
    TASK_ASSIGNMENT,
    TASK_COMPLETION,
    TASK_CREATION,
    StatusSummary,
    Task,
)

PRIORITY_LABELS = {"low": "低", "medium": "中", "high": "高"}
STATUS_LABELS = {
    "pending": "待機中",
    "in_progress": "進行中",
    "completed": "完了",
    "cancelled": "キャンセル",
}


def format_due_date(task: Task) -> str:
    if task.due_date is None:
        return "未設定"
    return task.due_date.strftime("%Y年%m月%d日")


def build_status_message(summary: StatusSummary) -> str:
    return (
        "📊 タスク状況\n"
        f"⏳ 待機中: {summary.pending}件\n"
        f"🔄 進行中: {summary.in_progress}件\n"
        f"✅ 完了: {summary.completed}件\n"
        f"⚠️ 期限切れ: {summary.overdue}件"
    )


def build_confirmation_message(
    intent: str,
    task: Task,
    assignee_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """Confirmation posted after a task was created or completed."""
    who = assignee_name or "未設定"
    if intent == TASK_CREATION:
        return (
            "✅ タスクを作成しました\n\n"
            f"📋 タイトル：{task.title}\n"
            f"📅 期限：{format_due_date(task)}\n"
            f"👤 担当者：{who}\n"
            f"⚠️ 優先度：{PRIORITY_LABELS.get(task.priority, task.priority)}\n"
            f"📊 ステータス：{STATUS_LABELS.get(task.status, task.status)}"
        )
    if intent == TASK_COMPLETION:
        done_at = task.completed_at or now or datetime.now()
        return (
            "🎉 タスクが完了しました\n\n"
            f"📋 タスク：{task.title}\n"
            f"👤 完了者：{who}\n"
            f"🕐 完了時刻：{done_at.strftime('%Y年%m月%d日 %H:%M')}"
        )
    if intent == TASK_ASSIGNMENT:
        return (
            "📝 タスクが割り当てられました\n\n"
            f"📋 タスク：{task.title}\n"
            f"👤 担当者：{who}\n"
            f"📅 期限：{format_due_date(task)}"
        )
    return "📋 メッセージを処理しました"
