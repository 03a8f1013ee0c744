"""
学习进度与测验计分

纯函数实现，不访问数据库：
- 合并已完成课时（集合并集，幂等）
- 按位置对齐计算测验百分制得分
- 覆盖记录最新测验得分（不保留历史）
- 汇总学习看板统计
"""
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Sequence

# 未作答哨兵值，永远不会与正确答案匹配
UNANSWERED = -1

# 及格线（百分制）
PASSING_SCORE = 60


@dataclass(frozen=True)
class ProgressState:
    """单个 (用户, 课程) 的学习进度"""
    completed_lesson_ids: frozenset = field(default_factory=frozenset)
    quiz_score: Optional[int] = None


EMPTY_PROGRESS = ProgressState()


@dataclass(frozen=True)
class QuizResult:
    """测验评分结果"""
    correct: int
    total: int
    score: int
    passed: bool


@dataclass(frozen=True)
class DashboardSummary:
    """学习看板统计"""
    enrolled_count: int
    total_lessons: int
    completed_count: int
    average_score: Optional[int]


def _round_half_up(value: float) -> int:
    # Python 的 round() 是银行家舍入，百分比统一四舍五入
    return int(value + 0.5)


def mark_lesson_complete(progress: Optional[ProgressState], lesson_id: str) -> ProgressState:
    """
    将课时并入已完成集合

    不校验课时是否属于该课程。progress 为 None 时视为空进度。
    """
    progress = progress or EMPTY_PROGRESS
    if lesson_id in progress.completed_lesson_ids:
        return progress
    return replace(
        progress,
        completed_lesson_ids=progress.completed_lesson_ids | {lesson_id},
    )


def record_quiz_score(progress: Optional[ProgressState], score: int) -> ProgressState:
    """
    覆盖最新测验得分，已完成课时保持不变

    Raises:
        ValueError: 得分不是 0-100 的整数
    """
    if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= 100:
        raise ValueError(f"测验得分必须是 0-100 的整数: {score!r}")
    progress = progress or EMPTY_PROGRESS
    return replace(progress, quiz_score=score)


def count_correct(questions: Sequence[Any], answers: Sequence[int]) -> int:
    """按位置对齐统计答对题数，缺失的答案按未作答处理"""
    correct = 0
    for i, question in enumerate(questions):
        submitted = answers[i] if i < len(answers) else UNANSWERED
        if submitted == question.answer_index:
            correct += 1
    return correct


def score_quiz(quiz: Any, answers: Sequence[int]) -> int:
    """
    计算测验百分制得分

    answers 与 quiz.questions 按位置一一对应，多余的答案被忽略。

    Raises:
        ValueError: 测验没有题目
    """
    return quiz_result(quiz, answers).score


def quiz_result(quiz: Any, answers: Sequence[int]) -> QuizResult:
    """计算测验得分并给出是否及格"""
    questions = list(quiz.questions)
    total = len(questions)
    if total == 0:
        raise ValueError("测验没有题目，无法计分")

    correct = count_correct(questions, answers)
    score = _round_half_up(100 * correct / total)
    return QuizResult(correct=correct, total=total, score=score, passed=is_passing(score))


def is_passing(score: Optional[int]) -> bool:
    return score is not None and score >= PASSING_SCORE


def completion_percentage(progress: Optional[ProgressState], lesson_count: int) -> int:
    """课程完成百分比，课程没有课时时为 0"""
    if lesson_count <= 0:
        return 0
    completed = len((progress or EMPTY_PROGRESS).completed_lesson_ids)
    return _round_half_up(100 * completed / lesson_count)


def aggregate_dashboard(
    courses: Iterable[Any],
    progress_by_course_id: Mapping[str, ProgressState],
    enrolled_course_ids: Iterable[str],
) -> DashboardSummary:
    """
    汇总学习看板

    Args:
        courses: 全部课程目录（课时总数按全目录统计，不限于已报名课程）
        progress_by_course_id: 用户各课程进度
        enrolled_course_ids: 用户已报名的课程ID

    Returns:
        DashboardSummary: average_score 在从未产生过测验得分时为 None
    """
    total_lessons = sum(len(course.lessons) for course in courses)
    completed_count = sum(
        len(progress.completed_lesson_ids) for progress in progress_by_course_id.values()
    )

    # 0 分也是有效数据，只排除 None
    scores = [
        progress.quiz_score
        for progress in progress_by_course_id.values()
        if progress.quiz_score is not None
    ]
    average_score = _round_half_up(sum(scores) / len(scores)) if scores else None

    return DashboardSummary(
        enrolled_count=len(set(enrolled_course_ids)),
        total_lessons=total_lessons,
        completed_count=completed_count,
        average_score=average_score,
    )


def format_duration(minutes: int) -> str:
    """将分钟数格式化为 "3h 0m" / "45m" """
    hours, rest = divmod(int(minutes), 60)
    return f"{hours}h {rest}m" if hours else f"{rest}m"
