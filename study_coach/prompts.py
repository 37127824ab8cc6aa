from __future__ import annotations

import dataclasses
import datetime as dt
import json
import typing as t

from .errors import ValidationError
from .schemas import schema_for

JsonDict = dict[str, t.Any]

DEFAULT_DIFFICULTY = "normal"
DEFAULT_HOURS_TODAY = 3


@dataclasses.dataclass(frozen=True)
class PromptSegment:
    """One part of the request: either instruction text or an inline document."""

    text: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    @staticmethod
    def of_text(text: str) -> "PromptSegment":
        return PromptSegment(text=text)

    @staticmethod
    def of_document(data: bytes, mime_type: str) -> "PromptSegment":
        return PromptSegment(data=data, mime_type=mime_type)

    @property
    def is_document(self) -> bool:
        return self.data is not None


@dataclasses.dataclass(frozen=True)
class Prompt:
    feature: str
    segments: tuple[PromptSegment, ...]
    schema: JsonDict


PARSE_INSTRUCTION = """
You are a helpful university course assistant.

Read the course syllabus provided and extract it as structured data:

- course_title: the full course title
- instructor: the instructor's name, if given
- term: the semester or term (for example "Fall 2025"), if given
- assessments: every graded item, each with
    - name (e.g. "Midterm 1", "Assignment 2")
    - type (e.g. exam, quiz, essay, lab, project)
    - weight_percent (a number from 0 to 100 when it can be inferred)
    - due_date (an ISO 8601 date string when an exact date is stated, otherwise null)
    - notes (extra details such as late penalties)
- weekly_topics: the week-by-week outline, each with
    - week_number (integer, starting at 1)
    - title (a short name for that week's topic)
    - topics (a short description)
    - readings (chapters or pages, when listed)

IMPORTANT:
- Only use information that is clearly stated in the syllabus.
- When something is missing, use null or an empty string.
- Always include the assessments and weekly_topics lists, even when empty.
""".strip()

PLAN_INSTRUCTION = """
You are a personal study coach for a university student.

You are given the course syllabus as JSON and a student profile with the
semester start date, the final exam date, the study hours available per
week and a difficulty mode.

Difficulty modes:
- "beginner": more review, smaller chunks, simpler tasks.
- "normal": a balanced plan.
- "hardcore": harder tasks, extra practice and exam-style questions.

Rules:
- Build the plan from the syllabus weekly_topics and assessments.
- Spread the work evenly from start_date to exam_date.
- Keep every week within hours_per_week.
- Line tasks up with upcoming assignments and exams.

Return JSON of the form:
{
  "weeks": [
    {
      "week_number": number,
      "date_range": "YYYY-MM-DD → YYYY-MM-DD",
      "topics_to_cover": "short description",
      "tasks": ["Read Ch 1", "Do 5 practice problems on recursion"],
      "estimated_time_hours": number,
      "focus": "e.g. Midterm prep / Final review / Project work"
    }
  ]
}
""".strip()

PRACTICE_TEMPLATE = """
Write practice material on the topic "{topic}" for a university-level course.

Difficulty: {difficulty}.

Produce:
- 5 practice questions, with short answers where appropriate.
- 5 flashcards as front/back pairs.

Return JSON of the form:
{{
  "topic": string,
  "difficulty": string,
  "questions": [{{"question": "...", "answer": "..."}}],
  "flashcards": [{{"front": "...", "back": "..."}}]
}}
""".strip()

TRACKER_TEMPLATE = """
You are a "Missing Assignment Tracker" assistant.

The student pastes messy text copied from an LMS gradebook, a syllabus or a
to-do list.

Your job:
1. Work out the list of assignments and their statuses.
2. Mark each one as exactly one of:
   - "submitted" (clearly done)
   - "missing" (past due with no submission, or a 0)
   - "upcoming" (due in the future)
   - "late" (past due but possibly still accepted)
3. Fill in weight_percent whenever a percentage is given.
4. Set priority_score so that heavier, later and sooner-due work ranks
   higher (roughly weight * lateness / days remaining). The score is a
   guide for the student, not an exact formula.
5. Write a short, human recommended_action for every assignment.
6. Suggest what to focus on TODAY given about {hours} hours.

Return JSON of the form:
{{
  "summary": "High level summary...",
  "assignments": [
    {{
      "course": "EECS 2101",
      "name": "Assignment 2",
      "status": "missing",
      "weight_percent": 15,
      "due_date": "2025-10-12",
      "notes": "Worth 15%, 2% per day late",
      "priority_score": 0.93,
      "recommended_action": "Start this today, it is still worth many marks."
    }}
  ],
  "today_focus": ["Finish Assignment 2 for EECS 2101", "Email the professor about Lab 1"]
}}

IMPORTANT:
- Use today's date from the text if it is given. Otherwise reason
  approximately and still classify every item.
- When unsure about an item, say so in its "notes".
""".strip()


def _is_blank(value: t.Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (dict, list)):
        return not value
    return False


def _positive_number(value: t.Any, field: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive number.")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a positive number.") from None
    if number != number or number <= 0 or number == float("inf"):
        raise ValidationError(f"{field} must be a positive number.")
    return number


def _hours_or_default(value: t.Any, default: int) -> int | float:
    if _is_blank(value):
        return default
    try:
        return _format_hours(_positive_number(value, "hours"))
    except ValidationError:
        return default


def _parse_date(value: t.Any, field: str) -> dt.date:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format.")
    try:
        return dt.date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format.") from None


def _format_hours(hours: float) -> int | float:
    return int(hours) if hours.is_integer() else hours


def _difficulty(value: t.Any) -> str:
    if _is_blank(value):
        return DEFAULT_DIFFICULTY
    return str(value).strip()


def _pretty(obj: t.Any) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2)


def build_parse_prompt(
    *,
    text: str | None = None,
    document: bytes | None = None,
    document_mime_type: str = "application/pdf",
) -> Prompt:
    text = (text or "").strip()
    if not text and not document:
        raise ValidationError("No syllabus text or file provided.")

    segments = [PromptSegment.of_text(PARSE_INSTRUCTION)]
    if document:
        segments.append(PromptSegment.of_document(document, document_mime_type))
        if text:
            segments.append(PromptSegment.of_text("Additional syllabus notes from the student:\n\n" + text))
    else:
        segments.append(PromptSegment.of_text(text))
    return Prompt(feature="parse", segments=tuple(segments), schema=schema_for("parse"))


def build_plan_prompt(
    *,
    syllabus: t.Any,
    start_date: t.Any,
    exam_date: t.Any,
    hours_per_week: t.Any,
    difficulty: t.Any = None,
) -> Prompt:
    fields = {
        "syllabus": syllabus,
        "startDate": start_date,
        "examDate": exam_date,
        "hoursPerWeek": hours_per_week,
    }
    missing = [name for name, value in fields.items() if _is_blank(value)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}.")
    if not isinstance(syllabus, dict):
        raise ValidationError("syllabus must be a JSON object (the result of /api/syllabus/parse).")

    start = _parse_date(start_date, "startDate")
    exam = _parse_date(exam_date, "examDate")
    if exam < start:
        raise ValidationError("examDate must not be before startDate.")
    hours = _positive_number(hours_per_week, "hoursPerWeek")
    mode = _difficulty(difficulty)

    profile = {
        "start_date": start.isoformat(),
        "exam_date": exam.isoformat(),
        "hours_per_week": _format_hours(hours),
        "difficulty": mode,
    }
    segments = (
        PromptSegment.of_text(PLAN_INSTRUCTION),
        PromptSegment.of_text("Course syllabus JSON:\n" + _pretty(syllabus)),
        PromptSegment.of_text("Student profile:\n" + _pretty(profile)),
    )
    return Prompt(feature="plan", segments=segments, schema=schema_for("plan"))


def build_practice_prompt(*, topic: t.Any, difficulty: t.Any = None) -> Prompt:
    if _is_blank(topic) or not isinstance(topic, str):
        raise ValidationError("Missing topic.")
    text = PRACTICE_TEMPLATE.format(topic=topic.strip(), difficulty=_difficulty(difficulty))
    return Prompt(feature="practice", segments=(PromptSegment.of_text(text),), schema=schema_for("practice"))


def build_tracker_prompt(*, raw_text: t.Any, hours_today: t.Any = None) -> Prompt:
    if _is_blank(raw_text) or not isinstance(raw_text, str):
        raise ValidationError("Missing rawText with your assignment list / grade info.")
    hours = _hours_or_default(hours_today, DEFAULT_HOURS_TODAY)
    segments = (
        PromptSegment.of_text(TRACKER_TEMPLATE.format(hours=hours)),
        PromptSegment.of_text("Raw text from student (LMS / syllabus / notes):\n\n" + raw_text),
    )
    return Prompt(feature="tracker", segments=segments, schema=schema_for("tracker"))


_BUILDERS: dict[str, t.Callable[..., Prompt]] = {
    "parse": build_parse_prompt,
    "plan": build_plan_prompt,
    "practice": build_practice_prompt,
    "tracker": build_tracker_prompt,
}


def build_prompt(feature: str, **inputs: t.Any) -> Prompt:
    try:
        builder = _BUILDERS[feature]
    except KeyError:
        raise ValueError(f"Unknown feature: {feature!r}") from None
    return builder(**inputs)
