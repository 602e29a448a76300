"""
Tests for the question-count parser.
"""

import pytest

from guide_harvester.counts import parse_question_count


class TestParseQuestionCount:
    """Free-text annotations degrade to 0 instead of raising."""

    @pytest.mark.parametrize("text,expected", [
        ("12 questões", 12),
        ("  7   QUESTÕES ", 7),
        ("1 questão", 1),
        ("uma questão", 1),
        ("Uma   Questão", 1),
        ("one question", 1),
        ("150 questions in 3 exams", 150),
    ])
    def test_parses_counts(self, text, expected):
        assert parse_question_count(text) == expected

    @pytest.mark.parametrize("text", [None, "", "   ", "sem questões", "questões"])
    def test_unparseable_is_zero(self, text):
        assert parse_question_count(text) == 0
