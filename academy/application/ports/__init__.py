from academy.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from academy.application.ports.repositories import (
    AnswerRepository,
    AssignmentRepository,
    ExamRepository,
    GradeRepository,
    GroupRepository,
    StudentRepository,
)
from academy.application.ports.events import EventPublisher

__all__ = [
    "UnitOfWork",
    "UnitOfWorkFactory",
    "ExamRepository",
    "AssignmentRepository",
    "AnswerRepository",
    "GradeRepository",
    "StudentRepository",
    "GroupRepository",
    "EventPublisher",
]
