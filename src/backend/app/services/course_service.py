"""
课程服务
课程目录查询，以及课程/课时/测验的增删改
"""
import logging
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import NotFoundError, ValidationFailed
from app.core.progress import format_duration
from app.models import Course, Lesson, Quiz, Question

logger = logging.getLogger(__name__)

COURSE_FIELDS = ("slug", "title", "description", "category", "level", "duration_mins")
LESSON_FIELDS = ("title", "content", "resources", "order")


def _new_id() -> str:
    return str(uuid.uuid4())


class CourseService:
    """课程服务"""

    # ==================== 查询 ====================

    @staticmethod
    def _with_content(query):
        return query.options(
            selectinload(Course.lessons),
            selectinload(Course.quiz).selectinload(Quiz.questions),
        )

    @staticmethod
    def get_courses(
        db: Session,
        search: Optional[str] = None,
        category: Optional[str] = None,
        level: Optional[str] = None,
    ) -> List[Course]:
        """
        获取课程目录

        Args:
            db: 数据库会话
            search: 关键字，在标题、描述、分类、难度中不区分大小写匹配
            category: 分类精确过滤（不区分大小写）
            level: 难度过滤

        Returns:
            List[Course]: 课程列表，最新创建的在前
        """
        query = CourseService._with_content(db.query(Course))

        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                Course.title.ilike(pattern),
                Course.description.ilike(pattern),
                Course.category.ilike(pattern),
                Course.level.ilike(pattern),
            ))
        if category:
            query = query.filter(Course.category.ilike(category.strip()))
        if level:
            query = query.filter(Course.level == level.strip().lower())

        return query.order_by(Course.created_at.desc(), Course.title.asc()).all()

    @staticmethod
    def get_course_by_id(db: Session, course_id: str) -> Optional[Course]:
        """
        根据ID获取课程（含课时与测验）

        Returns:
            Optional[Course]: 课程对象
        """
        return CourseService._with_content(db.query(Course)).filter(Course.id == course_id).first()

    @staticmethod
    def get_course_by_slug(db: Session, slug: str) -> Optional[Course]:
        return CourseService._with_content(db.query(Course)).filter(Course.slug == slug).first()

    @staticmethod
    def require_course(db: Session, course_id: str) -> Course:
        """获取课程，不存在时抛出 NotFoundError"""
        course = CourseService.get_course_by_id(db, course_id)
        if not course:
            raise NotFoundError(f"课程 {course_id} 不存在")
        return course

    @staticmethod
    def course_exists(db: Session, course_id: str) -> bool:
        return db.query(Course.id).filter(Course.id == course_id).first() is not None

    # ==================== 课程增删改 ====================

    @staticmethod
    def _check_slug_available(db: Session, slug: str, exclude_id: Optional[str] = None) -> None:
        query = db.query(Course.id).filter(Course.slug == slug)
        if exclude_id:
            query = query.filter(Course.id != exclude_id)
        if query.first():
            raise ValidationFailed.single("slug", f"slug 已被占用: {slug}")

    @staticmethod
    def _check_ids_available(db: Session, model, ids: Iterable[Optional[str]], field: str) -> None:
        """
        检查客户端指定的 ID 未被占用且在本次请求内不重复

        未指定 ID 的条目会自动生成 UUID，不参与检查。失败时回滚当前事务。

        Raises:
            ValidationFailed: ID 重复或已被占用
        """
        ids = [i for i in ids if i]
        duplicated = sorted({i for i in ids if ids.count(i) > 1})
        if duplicated:
            db.rollback()
            raise ValidationFailed.single(field, f"ID 重复: {', '.join(duplicated)}")
        if not ids:
            return

        taken = sorted(row.id for row in db.query(model.id).filter(model.id.in_(ids)).all())
        if taken:
            db.rollback()
            raise ValidationFailed.single(field, f"ID 已被占用: {', '.join(taken)}")

    @staticmethod
    def _commit(db: Session, field: str, message: str) -> None:
        """提交事务，唯一约束冲突（并发写入同一 slug/ID）转换为字段错误"""
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"写入冲突已回滚: field={field}, error={e.orig}")
            raise ValidationFailed.single(field, message)

    @staticmethod
    def create_course(db: Session, data: Dict, created_by: Optional[str] = None) -> Course:
        """
        创建课程

        Args:
            db: 数据库会话
            data: 已校验的课程字段，可选 lessons（列表）和 quiz
            created_by: 创建者用户ID

        Returns:
            Course: 新课程

        Raises:
            ValidationFailed: slug 或课时/测验/题目 ID 已存在
        """
        CourseService._check_slug_available(db, data["slug"])
        lessons = data.get("lessons") or []
        quiz = data.get("quiz")
        CourseService._check_ids_available(db, Lesson, [item.get("id") for item in lessons], "lessons")
        if quiz:
            CourseService._check_ids_available(db, Quiz, [quiz.get("id")], "quiz")
            CourseService._check_ids_available(
                db, Question, [item.get("id") for item in quiz["questions"]], "quiz.questions"
            )

        course = Course(
            id=data.get("id") or _new_id(),
            created_by=created_by,
            created_at=datetime.utcnow(),
            **{key: data[key] for key in COURSE_FIELDS},
        )
        for position, lesson_data in enumerate(lessons):
            course.lessons.append(CourseService._build_lesson(lesson_data, default_order=position + 1))
        if quiz:
            course.quiz = CourseService._build_quiz(quiz)

        db.add(course)
        CourseService._commit(db, "slug", f"课程写入冲突，slug 或 ID 已被占用: {data['slug']}")
        logger.info(f"课程已创建: id={course.id}, slug={course.slug}, by={created_by}")
        return CourseService.require_course(db, course.id)

    @staticmethod
    def update_course(db: Session, course_id: str, changes: Dict) -> Course:
        """
        更新课程元信息（只更新传入的字段）

        Raises:
            NotFoundError: 课程不存在
            ValidationFailed: 新 slug 已被其他课程占用
        """
        course = CourseService.require_course(db, course_id)

        if "slug" in changes and changes["slug"] != course.slug:
            CourseService._check_slug_available(db, changes["slug"], exclude_id=course_id)

        for key in COURSE_FIELDS:
            if key in changes:
                setattr(course, key, changes[key])

        CourseService._commit(db, "slug", f"slug 已被占用: {course.slug}")
        logger.info(f"课程已更新: id={course_id}, fields={sorted(changes)}")
        return CourseService.require_course(db, course_id)

    @staticmethod
    def delete_course(db: Session, course_id: str) -> None:
        """删除课程，级联删除课时、测验、报名与进度"""
        course = CourseService.require_course(db, course_id)
        db.delete(course)
        db.commit()
        logger.info(f"课程已删除: id={course_id}")

    # ==================== 课时 ====================

    @staticmethod
    def _build_lesson(data: Dict, default_order: int = 0) -> Lesson:
        order = data.get("order")
        return Lesson(
            id=data.get("id") or _new_id(),
            title=data["title"],
            content=data["content"],
            resources=data.get("resources") or [],
            order=default_order if order is None else order,
        )

    @staticmethod
    def _require_lesson(db: Session, course_id: str, lesson_id: str) -> Lesson:
        lesson = db.query(Lesson).filter(
            Lesson.id == lesson_id,
            Lesson.course_id == course_id
        ).first()
        if not lesson:
            raise NotFoundError(f"课时 {lesson_id} 不存在")
        return lesson

    @staticmethod
    def add_lesson(db: Session, course_id: str, data: Dict) -> Lesson:
        """
        向课程追加课时

        未指定 order 时排在现有课时之后。

        Raises:
            NotFoundError: 课程不存在
            ValidationFailed: 课时 ID 已被占用
        """
        course = CourseService.require_course(db, course_id)
        CourseService._check_ids_available(db, Lesson, [data.get("id")], "id")
        next_order = max((lesson.order or 0 for lesson in course.lessons), default=0) + 1
        lesson = CourseService._build_lesson(data, default_order=next_order)
        course.lessons.append(lesson)
        CourseService._commit(db, "id", f"课时 ID 已被占用: {lesson.id}")
        db.refresh(lesson)
        logger.info(f"课时已添加: course={course_id}, lesson={lesson.id}")
        return lesson

    @staticmethod
    def update_lesson(db: Session, course_id: str, lesson_id: str, changes: Dict) -> Lesson:
        lesson = CourseService._require_lesson(db, course_id, lesson_id)
        for key in LESSON_FIELDS:
            if key in changes:
                value = changes[key]
                if key == "resources" and value is None:
                    value = []
                setattr(lesson, key, value)
        db.commit()
        db.refresh(lesson)
        return lesson

    @staticmethod
    def delete_lesson(db: Session, course_id: str, lesson_id: str) -> None:
        # 已记录的完成状态保留，与"不校验课时归属"保持一致
        lesson = CourseService._require_lesson(db, course_id, lesson_id)
        db.delete(lesson)
        db.commit()
        logger.info(f"课时已删除: course={course_id}, lesson={lesson_id}")

    # ==================== 测验 ====================

    @staticmethod
    def _build_quiz(data: Dict) -> Quiz:
        quiz = Quiz(id=data.get("id") or _new_id(), title=data["title"])
        for position, question in enumerate(data["questions"]):
            quiz.questions.append(Question(
                id=question.get("id") or _new_id(),
                prompt=question["prompt"],
                choices=list(question["choices"]),
                answer_index=question["answer_index"],
                position=position,
            ))
        return quiz

    @staticmethod
    def replace_quiz(db: Session, course_id: str, data: Dict) -> Quiz:
        """
        设置课程测验（整体替换已有测验和题目）

        旧测验先在事务内删除，因此新测验可以沿用本课程原有的测验/题目 ID。

        Raises:
            NotFoundError: 课程不存在
            ValidationFailed: 测验或题目 ID 被其他课程占用
        """
        course = CourseService.require_course(db, course_id)
        if course.quiz is not None:
            db.delete(course.quiz)
            db.flush()
        CourseService._check_ids_available(db, Quiz, [data.get("id")], "id")
        CourseService._check_ids_available(
            db, Question, [item.get("id") for item in data["questions"]], "questions"
        )
        quiz = CourseService._build_quiz(data)
        quiz.course_id = course.id
        db.add(quiz)
        CourseService._commit(db, "id", f"测验写入冲突，ID 已被占用: {quiz.id}")
        db.expire(course)
        logger.info(f"测验已更新: course={course_id}, questions={len(data['questions'])}")
        return CourseService.require_course(db, course_id).quiz

    @staticmethod
    def delete_quiz(db: Session, course_id: str) -> None:
        course = CourseService.require_course(db, course_id)
        if course.quiz is None:
            raise NotFoundError(f"课程 {course_id} 没有测验")
        db.delete(course.quiz)
        db.commit()

    # ==================== 序列化 ====================

    @staticmethod
    def lesson_to_dict(lesson: Lesson) -> Dict:
        return {
            "id": lesson.id,
            "course_id": lesson.course_id,
            "title": lesson.title,
            "content": lesson.content,
            "resources": lesson.resources or [],
            "order": lesson.order,
        }

    @staticmethod
    def quiz_to_dict(quiz: Quiz, include_answers: bool = False) -> Dict:
        questions = []
        for question in quiz.questions:
            item = {
                "id": question.id,
                "prompt": question.prompt,
                "choices": question.choices,
            }
            if include_answers:
                item["answer_index"] = question.answer_index
            questions.append(item)
        return {"id": quiz.id, "title": quiz.title, "questions": questions}

    @staticmethod
    def course_summary(course: Course) -> Dict:
        """课程元信息（不含课时内容）"""
        return {
            "id": course.id,
            "slug": course.slug,
            "title": course.title,
            "description": course.description,
            "category": course.category,
            "level": course.level,
            "duration_mins": course.duration_mins,
            "duration_label": format_duration(course.duration_mins),
            "lesson_count": len(course.lessons),
            "has_quiz": course.quiz is not None,
            "created_at": course.created_at.isoformat() if course.created_at else None,
        }

    @staticmethod
    def course_to_dict(course: Course, include_answers: bool = False) -> Dict:
        """
        课程详情（课时按 order 排序，含测验）

        Args:
            course: 课程
            include_answers: 是否返回正确答案（仅课程管理者可见）
        """
        result = CourseService.course_summary(course)
        result["lessons"] = [CourseService.lesson_to_dict(lesson) for lesson in course.lessons]
        result["quiz"] = (
            CourseService.quiz_to_dict(course.quiz, include_answers) if course.quiz else None
        )
        return result
