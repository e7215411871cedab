# apps/domains/exams/models/__init__.py
from .exam import Exam
from .question import ExamQuestion, Question

__all__ = [
    "Exam",
    "Question",
    "ExamQuestion",
]
