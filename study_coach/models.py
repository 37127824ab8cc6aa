from __future__ import annotations

import dataclasses
import typing as t

JsonDict = dict[str, t.Any]

ASSIGNMENT_STATUSES = ("missing", "submitted", "upcoming", "late")


class ShapeError(ValueError):
    """Decoded JSON does not have the shape of the expected entity."""


def _require_dict(value: t.Any, where: str) -> JsonDict:
    if not isinstance(value, dict):
        raise ShapeError(f"{where} must be an object, got {type(value).__name__}")
    return value


def _require_str(data: JsonDict, key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ShapeError(f"{where}.{key} is required and must be a string")
    return value


def _opt_str(data: JsonDict, key: str, where: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ShapeError(f"{where}.{key} must be a string or null")


def _opt_number(data: JsonDict, key: str, where: str) -> float | int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ShapeError(f"{where}.{key} must be a number or null")
    return value


def _require_number(data: JsonDict, key: str, where: str) -> float | int:
    value = _opt_number(data, key, where)
    if value is None:
        raise ShapeError(f"{where}.{key} is required and must be a number")
    return value


def _require_int(data: JsonDict, key: str, where: str) -> int:
    value = _require_number(data, key, where)
    if isinstance(value, float):
        if not value.is_integer():
            raise ShapeError(f"{where}.{key} must be an integer")
        value = int(value)
    return value


def _list(data: JsonDict, key: str, where: str, *, required: bool = False) -> list[t.Any]:
    value = data.get(key)
    if value is None:
        if required:
            raise ShapeError(f"{where}.{key} is required and must be a list")
        return []
    if not isinstance(value, list):
        raise ShapeError(f"{where}.{key} must be a list")
    return value


def _str_list(data: JsonDict, key: str, where: str) -> list[str]:
    out: list[str] = []
    for i, item in enumerate(_list(data, key, where)):
        if not isinstance(item, str):
            raise ShapeError(f"{where}.{key}[{i}] must be a string")
        out.append(item)
    return out


# ---------- Syllabus ----------


@dataclasses.dataclass(frozen=True)
class AssessmentItem:
    name: str
    type: str | None = None
    weight_percent: float | int | None = None
    due_date: str | None = None
    notes: str | None = None

    def to_dict(self) -> JsonDict:
        return dataclasses.asdict(self)

    @staticmethod
    def from_dict(data: t.Any, where: str = "assessment") -> "AssessmentItem":
        data = _require_dict(data, where)
        weight = _opt_number(data, "weight_percent", where)
        if weight is not None and not 0 <= weight <= 100:
            raise ShapeError(f"{where}.weight_percent must be between 0 and 100")
        return AssessmentItem(
            name=_require_str(data, "name", where),
            type=_opt_str(data, "type", where),
            weight_percent=weight,
            due_date=_opt_str(data, "due_date", where),
            notes=_opt_str(data, "notes", where),
        )


@dataclasses.dataclass(frozen=True)
class WeekTopic:
    week_number: int
    title: str
    topics: str | None = None
    readings: str | None = None

    def to_dict(self) -> JsonDict:
        return dataclasses.asdict(self)

    @staticmethod
    def from_dict(data: t.Any, where: str = "week") -> "WeekTopic":
        data = _require_dict(data, where)
        week_number = _require_int(data, "week_number", where)
        if week_number < 1:
            raise ShapeError(f"{where}.week_number must be positive")
        return WeekTopic(
            week_number=week_number,
            title=_require_str(data, "title", where),
            topics=_opt_str(data, "topics", where),
            readings=_opt_str(data, "readings", where),
        )


@dataclasses.dataclass(frozen=True)
class SyllabusRecord:
    course_title: str
    instructor: str | None = None
    term: str | None = None
    assessments: list[AssessmentItem] = dataclasses.field(default_factory=list)
    weekly_topics: list[WeekTopic] = dataclasses.field(default_factory=list)

    def to_dict(self) -> JsonDict:
        return {
            "course_title": self.course_title,
            "instructor": self.instructor,
            "term": self.term,
            "assessments": [a.to_dict() for a in self.assessments],
            "weekly_topics": [w.to_dict() for w in self.weekly_topics],
        }

    @staticmethod
    def from_dict(data: t.Any) -> "SyllabusRecord":
        data = _require_dict(data, "syllabus")
        return SyllabusRecord(
            course_title=_require_str(data, "course_title", "syllabus"),
            instructor=_opt_str(data, "instructor", "syllabus"),
            term=_opt_str(data, "term", "syllabus"),
            assessments=[
                AssessmentItem.from_dict(a, f"syllabus.assessments[{i}]")
                for i, a in enumerate(_list(data, "assessments", "syllabus"))
            ],
            weekly_topics=[
                WeekTopic.from_dict(w, f"syllabus.weekly_topics[{i}]")
                for i, w in enumerate(_list(data, "weekly_topics", "syllabus"))
            ],
        )


# ---------- Study plan ----------


@dataclasses.dataclass(frozen=True)
class WeekPlan:
    week_number: int
    topics_to_cover: str
    tasks: list[str]
    estimated_time_hours: float | int
    date_range: str | None = None
    focus: str | None = None

    def to_dict(self) -> JsonDict:
        return {
            "week_number": self.week_number,
            "date_range": self.date_range,
            "topics_to_cover": self.topics_to_cover,
            "tasks": list(self.tasks),
            "estimated_time_hours": self.estimated_time_hours,
            "focus": self.focus,
        }

    @staticmethod
    def from_dict(data: t.Any, where: str = "week") -> "WeekPlan":
        data = _require_dict(data, where)
        hours = _require_number(data, "estimated_time_hours", where)
        if hours < 0:
            raise ShapeError(f"{where}.estimated_time_hours must be non-negative")
        _list(data, "tasks", where, required=True)
        return WeekPlan(
            week_number=_require_int(data, "week_number", where),
            topics_to_cover=_require_str(data, "topics_to_cover", where),
            tasks=_str_list(data, "tasks", where),
            estimated_time_hours=hours,
            date_range=_opt_str(data, "date_range", where),
            focus=_opt_str(data, "focus", where),
        )


@dataclasses.dataclass(frozen=True)
class StudyPlan:
    weeks: list[WeekPlan]

    def to_dict(self) -> JsonDict:
        return {"weeks": [w.to_dict() for w in self.weeks]}

    @staticmethod
    def from_dict(data: t.Any) -> "StudyPlan":
        data = _require_dict(data, "plan")
        return StudyPlan(
            weeks=[
                WeekPlan.from_dict(w, f"plan.weeks[{i}]")
                for i, w in enumerate(_list(data, "weeks", "plan", required=True))
            ]
        )


# ---------- Practice ----------


@dataclasses.dataclass(frozen=True)
class PracticeQuestion:
    question: str
    answer: str | None = None

    def to_dict(self) -> JsonDict:
        return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True)
class Flashcard:
    front: str
    back: str

    def to_dict(self) -> JsonDict:
        return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True)
class PracticeSet:
    topic: str
    difficulty: str | None
    questions: list[PracticeQuestion]
    flashcards: list[Flashcard]

    def to_dict(self) -> JsonDict:
        return {
            "topic": self.topic,
            "difficulty": self.difficulty,
            "questions": [q.to_dict() for q in self.questions],
            "flashcards": [f.to_dict() for f in self.flashcards],
        }

    @staticmethod
    def from_dict(data: t.Any) -> "PracticeSet":
        data = _require_dict(data, "practice")
        questions: list[PracticeQuestion] = []
        for i, q in enumerate(_list(data, "questions", "practice", required=True)):
            where = f"practice.questions[{i}]"
            q = _require_dict(q, where)
            questions.append(
                PracticeQuestion(question=_require_str(q, "question", where), answer=_opt_str(q, "answer", where))
            )
        flashcards: list[Flashcard] = []
        for i, f in enumerate(_list(data, "flashcards", "practice", required=True)):
            where = f"practice.flashcards[{i}]"
            f = _require_dict(f, where)
            flashcards.append(Flashcard(front=_require_str(f, "front", where), back=_require_str(f, "back", where)))
        return PracticeSet(
            topic=_require_str(data, "topic", "practice"),
            difficulty=_opt_str(data, "difficulty", "practice"),
            questions=questions,
            flashcards=flashcards,
        )


# ---------- Assignment tracker ----------


@dataclasses.dataclass(frozen=True)
class TrackedAssignment:
    name: str
    status: str
    course: str | None = None
    weight_percent: float | int | None = None
    due_date: str | None = None
    notes: str | None = None
    priority_score: float | int | None = None
    recommended_action: str | None = None

    def to_dict(self) -> JsonDict:
        return {
            "course": self.course,
            "name": self.name,
            "status": self.status,
            "weight_percent": self.weight_percent,
            "due_date": self.due_date,
            "notes": self.notes,
            "priority_score": self.priority_score,
            "recommended_action": self.recommended_action,
        }

    @staticmethod
    def from_dict(data: t.Any, where: str = "assignment") -> "TrackedAssignment":
        data = _require_dict(data, where)
        status = _require_str(data, "status", where).strip().lower()
        if status not in ASSIGNMENT_STATUSES:
            raise ShapeError(f"{where}.status must be one of {', '.join(ASSIGNMENT_STATUSES)}")
        return TrackedAssignment(
            name=_require_str(data, "name", where),
            status=status,
            course=_opt_str(data, "course", where),
            weight_percent=_opt_number(data, "weight_percent", where),
            due_date=_opt_str(data, "due_date", where),
            notes=_opt_str(data, "notes", where),
            priority_score=_opt_number(data, "priority_score", where),
            recommended_action=_opt_str(data, "recommended_action", where),
        )


@dataclasses.dataclass(frozen=True)
class AssignmentTracker:
    summary: str
    assignments: list[TrackedAssignment]
    today_focus: list[str] = dataclasses.field(default_factory=list)

    def to_dict(self) -> JsonDict:
        return {
            "summary": self.summary,
            "assignments": [a.to_dict() for a in self.assignments],
            "today_focus": list(self.today_focus),
        }

    @staticmethod
    def from_dict(data: t.Any) -> "AssignmentTracker":
        data = _require_dict(data, "tracker")
        return AssignmentTracker(
            summary=_require_str(data, "summary", "tracker"),
            assignments=[
                TrackedAssignment.from_dict(a, f"tracker.assignments[{i}]")
                for i, a in enumerate(_list(data, "assignments", "tracker", required=True))
            ],
            today_focus=_str_list(data, "today_focus", "tracker"),
        )
