"""Tests for domain/normalizer.py."""

from taskline.domain.normalizer import normalize


class TestNormalize:
    def test_full_width_colon_and_exclamation_run(self):
        assert normalize("タスク：会場設営！！！") == "タスク 会場設営"

    def test_half_width_colon(self):
        assert normalize("タスク: 会場設営をする") == "タスク 会場設営をする"

    def test_question_run(self):
        assert normalize("進捗は？？") == "進捗は"

    def test_single_exclamation_kept(self):
        assert normalize("準備完了!") == "準備完了!"

    def test_bullets_removed(self):
        assert normalize("・受付準備\n● 看板") == "受付準備 看板"

    def test_dash_bullet_at_token_start(self):
        assert normalize("- 会場設営") == "会場設営"

    def test_hyphen_inside_word_kept(self):
        assert normalize("6-15 まで") == "6-15 まで"

    def test_whitespace_collapsed(self):
        assert normalize("  タスク \t\n  準備  ") == "タスク 準備"

    def test_mentions_survive(self):
        assert normalize("@田中さん お願いします") == "@田中さん お願いします"

    def test_empty(self):
        assert normalize("") == ""
        assert normalize("   ") == ""
