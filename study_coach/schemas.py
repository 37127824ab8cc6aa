"""Output-shape descriptors sent to Gemini as ``responseJsonSchema``."""
from __future__ import annotations

import copy
import typing as t

JsonDict = dict[str, t.Any]

NULLABLE_STRING: JsonDict = {"type": ["string", "null"]}
NULLABLE_NUMBER: JsonDict = {"type": ["number", "null"]}


def _nullable(kind: str, description: str) -> JsonDict:
    return {"type": [kind, "null"], "description": description}


SYLLABUS_SCHEMA: JsonDict = {
    "type": "object",
    "properties": {
        "course_title": {"type": "string", "description": "Course title"},
        "instructor": _nullable("string", "Instructor name"),
        "term": _nullable("string", "Term or semester info"),
        "assessments": {
            "type": "array",
            "description": "List of graded items",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "type": {"type": "string"},
                    "weight_percent": {"type": ["number", "null"], "minimum": 0, "maximum": 100},
                    "due_date": _nullable("string", "Due date in ISO format if possible"),
                    "notes": NULLABLE_STRING,
                },
                "required": ["name"],
            },
        },
        "weekly_topics": {
            "type": "array",
            "description": "List of week-by-week topics",
            "items": {
                "type": "object",
                "properties": {
                    "week_number": {"type": "integer", "minimum": 1},
                    "title": {"type": "string"},
                    "topics": NULLABLE_STRING,
                    "readings": NULLABLE_STRING,
                },
                "required": ["week_number", "title"],
            },
        },
    },
    "required": ["course_title", "assessments", "weekly_topics"],
}

PLAN_SCHEMA: JsonDict = {
    "type": "object",
    "properties": {
        "weeks": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "week_number": {"type": "integer"},
                    "date_range": {"type": "string"},
                    "topics_to_cover": {"type": "string"},
                    "tasks": {"type": "array", "items": {"type": "string"}},
                    "estimated_time_hours": {"type": "number", "minimum": 0},
                    "focus": {"type": "string"},
                },
                "required": ["week_number", "topics_to_cover", "tasks", "estimated_time_hours"],
            },
        }
    },
    "required": ["weeks"],
}

PRACTICE_SCHEMA: JsonDict = {
    "type": "object",
    "properties": {
        "topic": {"type": "string"},
        "difficulty": {"type": "string"},
        "questions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "question": {"type": "string"},
                    "answer": NULLABLE_STRING,
                },
                "required": ["question"],
            },
        },
        "flashcards": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "front": {"type": "string"},
                    "back": {"type": "string"},
                },
                "required": ["front", "back"],
            },
        },
    },
    "required": ["topic", "questions", "flashcards"],
}

TRACKER_SCHEMA: JsonDict = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
        "assignments": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "course": NULLABLE_STRING,
                    "name": {"type": "string"},
                    "status": {
                        "type": "string",
                        "enum": ["missing", "submitted", "upcoming", "late"],
                    },
                    "weight_percent": NULLABLE_NUMBER,
                    "due_date": NULLABLE_STRING,
                    "notes": NULLABLE_STRING,
                    "priority_score": _nullable("number", "Higher = more urgent/important"),
                    "recommended_action": NULLABLE_STRING,
                },
                "required": ["name", "status"],
            },
        },
        "today_focus": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["summary", "assignments"],
}

_SCHEMAS: dict[str, JsonDict] = {
    "parse": SYLLABUS_SCHEMA,
    "plan": PLAN_SCHEMA,
    "practice": PRACTICE_SCHEMA,
    "tracker": TRACKER_SCHEMA,
}


def schema_for(feature: str) -> JsonDict:
    """Return a private copy of the schema so callers cannot mutate the module constants."""
    try:
        return copy.deepcopy(_SCHEMAS[feature])
    except KeyError:
        raise ValueError(f"Unknown feature: {feature!r}") from None
