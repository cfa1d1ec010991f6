"""Tests for domain/classifier.py — rule cascade and confidence scores."""

from datetime import date

import pytest

from taskline.domain.classifier import GENERAL_CONFIDENCE, RULES, IntentRule, classify
from taskline.domain.extractor import extract_entities
from taskline.domain.models import ExtractedData
from taskline.domain.normalizer import normalize

TODAY = date(2025, 6, 10)


def run(text: str):
    return classify(normalize(text), extract_entities(text, today=TODAY))


class TestCreation:
    def test_detects_creation(self):
        result = run("タスク: 準備作業をする")
        assert result.intent == "task_creation"
        assert result.confidence > 0.4

    def test_title_raises_confidence(self):
        assert run("タスク: 明確なタイトル").confidence > 0.7

    def test_without_title(self):
        result = run("タスク")
        assert result.intent == "task_creation"
        assert 0.4 < result.confidence <= 0.5

    def test_deadline_raises_confidence(self):
        with_deadline = run("タスク: 作業 明日まで")
        without = run("タスク: 作業")
        assert with_deadline.confidence > without.confidence
        assert extract_entities("タスク: 作業 明日まで", today=TODAY).to_dict()["has_deadline"] is True

    def test_creation_beats_assignment(self):
        assert run("タスク: 受付準備 @田中 お願い").intent == "task_creation"

    def test_confidence_capped(self):
        result = run("タスク: 受付準備 明日まで @田中")
        assert result.confidence == 1.0


class TestCompletion:
    def test_detects_completion(self):
        result = run("音響チェック完了しました")
        assert result.intent == "task_completion"
        assert result.confidence == 0.7

    def test_latin_keyword(self):
        assert run("sound check DONE").intent == "task_completion"

    def test_completion_beats_status(self):
        assert run("確認完了").intent == "task_completion"


class TestAssignment:
    def test_mention_with_request(self):
        result = run("@田中さん お願いします")
        assert result.intent == "task_assignment"
        assert result.confidence == 0.5

    def test_bare_mention(self):
        result = run("@田中")
        assert result.intent == "task_assignment"
        assert result.confidence == 0.3

    def test_request_without_mention_is_general(self):
        assert run("お願いします").intent == "general_message"

    def test_full_width_mention(self):
        result = run("＠田中 よろしく")
        assert result.intent == "task_assignment"
        assert result.confidence == 0.3

    def test_full_width_mention_with_request(self):
        result = run("＠田中さん お願いします")
        assert result.intent == "task_assignment"
        assert result.confidence == 0.5


class TestStatusInquiry:
    def test_progress_question(self):
        result = run("進捗はどうですか？")
        assert result.intent == "status_inquiry"
        assert result.confidence == 0.6

    def test_latin_status(self):
        assert run("Status?").intent == "status_inquiry"


class TestGeneral:
    def test_greeting(self):
        result = run("こんにちは")
        assert result.intent == "general_message"
        assert result.confidence == GENERAL_CONFIDENCE

    def test_empty(self):
        assert run("").intent == "general_message"


class TestConfidenceBounds:
    @pytest.mark.parametrize(
        "text",
        [
            "",
            "こんにちは",
            "タスク",
            "タスク: 受付準備 明日まで @田中 @佐藤 緊急",
            "完了",
            "@a @b @c 担当 お願い assign",
            "進捗確認",
            "！！！？？？",
        ],
    )
    def test_within_unit_interval(self, text):
        assert 0.0 <= run(text).confidence <= 1.0


class TestCustomRules:
    def test_rules_are_data(self):
        urgent = IntentRule(
            "urgent_ping",
            lambda text, data, kw: "至急" in text,
            lambda text, data, kw: 5.0,
        )
        result = classify("至急", ExtractedData(), rules=(urgent,) + tuple(RULES))
        assert result.intent == "urgent_ping"
        assert result.confidence == 1.0
