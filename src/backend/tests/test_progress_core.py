"""
学习进度与测验计分测试（纯函数，不需要数据库）
"""
from types import SimpleNamespace

import pytest

from app.core.progress import (
    EMPTY_PROGRESS,
    PASSING_SCORE,
    UNANSWERED,
    ProgressState,
    aggregate_dashboard,
    completion_percentage,
    format_duration,
    is_passing,
    mark_lesson_complete,
    quiz_result,
    record_quiz_score,
    score_quiz,
)


def make_quiz(answer_indexes):
    return SimpleNamespace(questions=[SimpleNamespace(answer_index=i) for i in answer_indexes])


def make_course(lesson_count):
    return SimpleNamespace(lessons=[object()] * lesson_count)


class TestMarkLessonComplete:

    def test_none_treated_as_empty(self):
        progress = mark_lesson_complete(None, "l-js-1")
        assert progress.completed_lesson_ids == {"l-js-1"}
        assert progress.quiz_score is None

    def test_idempotent(self):
        once = mark_lesson_complete(EMPTY_PROGRESS, "l-js-1")
        twice = mark_lesson_complete(once, "l-js-1")
        assert twice == once

    def test_union_keeps_score(self):
        progress = ProgressState(frozenset({"l-js-1"}), quiz_score=50)
        updated = mark_lesson_complete(progress, "l-js-2")
        assert updated.completed_lesson_ids == {"l-js-1", "l-js-2"}
        assert updated.quiz_score == 50

    def test_returns_new_value(self):
        progress = ProgressState(frozenset({"a"}))
        mark_lesson_complete(progress, "b")
        assert progress.completed_lesson_ids == {"a"}


class TestScoreQuiz:
    """测验 q-js-1：两道题，正确答案 [1, 3]"""

    @pytest.fixture
    def quiz(self):
        return make_quiz([1, 3])

    def test_all_correct(self, quiz):
        assert score_quiz(quiz, [1, 3]) == 100

    def test_half_correct(self, quiz):
        assert score_quiz(quiz, [1, 0]) == 50

    def test_no_answers(self, quiz):
        assert score_quiz(quiz, []) == 0

    def test_unanswered_sentinel_never_matches(self, quiz):
        assert score_quiz(quiz, [UNANSWERED, UNANSWERED]) == 0

    def test_extra_answers_ignored(self, quiz):
        assert score_quiz(quiz, [1, 3, 2, 2]) == 100

    def test_positional_alignment(self):
        """题目顺序调换而答案不变，得分必须变化"""
        answers = [1, 3]
        assert score_quiz(make_quiz([1, 3]), answers) == 100
        assert score_quiz(make_quiz([3, 1]), answers) == 0

    def test_rounding(self):
        assert score_quiz(make_quiz([0, 0, 0]), [0, 1, 1]) == 33
        assert score_quiz(make_quiz([0, 0, 0]), [0, 0, 1]) == 67
        assert score_quiz(make_quiz([0] * 8), [0, 0, 0, 0, 0, 1, 1, 1]) == 63

    def test_empty_quiz_rejected(self):
        with pytest.raises(ValueError):
            score_quiz(make_quiz([]), [])

    def test_quiz_result_passed(self, quiz):
        result = quiz_result(quiz, [1, 3])
        assert (result.correct, result.total, result.score, result.passed) == (2, 2, 100, True)
        assert quiz_result(quiz, [1, 0]).passed is False


class TestRecordQuizScore:

    def test_overwrites_latest(self):
        progress = record_quiz_score(None, 40)
        progress = record_quiz_score(progress, 90)
        assert progress.quiz_score == 90

    def test_keeps_completed_lessons(self):
        progress = ProgressState(frozenset({"l-ui-1"}), quiz_score=10)
        assert record_quiz_score(progress, 0).completed_lesson_ids == {"l-ui-1"}

    @pytest.mark.parametrize("score", [-1, 101, 50.5, True])
    def test_rejects_invalid(self, score):
        with pytest.raises(ValueError):
            record_quiz_score(None, score)


class TestAggregateDashboard:

    def test_catalog_wide_lesson_total(self):
        courses = [make_course(3), make_course(2)]
        progress = {"c-js-101": ProgressState(frozenset({"l-js-1", "l-js-2"}))}
        summary = aggregate_dashboard(courses, progress, ["c-js-101"])
        assert summary.enrolled_count == 1
        assert summary.total_lessons == 5
        assert summary.completed_count == 2
        assert summary.average_score is None

    def test_zero_score_counts(self):
        progress = {
            "a": ProgressState(quiz_score=0),
            "b": ProgressState(quiz_score=100),
        }
        assert aggregate_dashboard([], progress, []).average_score == 50

    def test_only_zero_score_is_data(self):
        summary = aggregate_dashboard([], {"a": ProgressState(quiz_score=0)}, [])
        assert summary.average_score == 0

    def test_average_rounded(self):
        progress = {
            "a": ProgressState(quiz_score=50),
            "b": ProgressState(quiz_score=100),
            "c": ProgressState(quiz_score=100),
        }
        assert aggregate_dashboard([], progress, []).average_score == 83

    def test_duplicate_enrollments_collapse(self):
        assert aggregate_dashboard([], {}, ["a", "a", "b"]).enrolled_count == 2


class TestHelpers:

    def test_completion_percentage(self):
        progress = ProgressState(frozenset({"l-js-1", "l-js-2"}))
        assert completion_percentage(progress, 3) == 67
        assert completion_percentage(None, 3) == 0
        assert completion_percentage(progress, 0) == 0

    def test_is_passing(self):
        assert is_passing(PASSING_SCORE)
        assert not is_passing(PASSING_SCORE - 1)
        assert not is_passing(None)

    @pytest.mark.parametrize("minutes, label", [(180, "3h 0m"), (45, "45m"), (125, "2h 5m")])
    def test_format_duration(self, minutes, label):
        assert format_duration(minutes) == label
