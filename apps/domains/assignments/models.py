from django.conf import settings
from django.db import models

from apps.api.common.models import TimestampModel


class ExamAssignment(TimestampModel):
    """
    학생 1명의 시험 1건 응시 인스턴스.
    access_token: 응시 링크용 capability 토큰 (hex 64자, 유일 인덱스)

    상태 전이는 academy.domain.assignments.entities.Assignment 규칙 + 조건부 UPDATE로만.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        IN_PROGRESS = "in_progress", "In progress"
        SUBMITTED = "submitted", "Submitted"
        GRADED = "graded", "Graded"

    exam = models.ForeignKey(
        "exams.Exam",
        on_delete=models.CASCADE,
        related_name="assignments",
    )
    student = models.ForeignKey(
        "students.Student",
        on_delete=models.CASCADE,
        related_name="exam_assignments",
    )

    access_token = models.CharField(max_length=64, unique=True, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )

    assigned_at = models.DateTimeField()
    started_at = models.DateTimeField(null=True, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)

    # 자동 채점 백분율 (0~100)
    score = models.FloatField(null=True, blank=True)

    class Meta:
        db_table = "assignments_exam_assignment"
        ordering = ["-assigned_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["exam", "student"],
                name="uniq_assignment_exam_student",
            )
        ]

    def __str__(self):
        return f"Assignment({self.id}) exam={self.exam_id} student={self.student_id} [{self.status}]"


class StudentAnswer(models.Model):
    """
    문항 응답. (assignment, question_id) 당 1행.
    question_id는 문제은행 Question PK (FK 대신 값 보관: 시험 구성이 바뀌어도 응답 유지)
    """

    assignment = models.ForeignKey(
        ExamAssignment,
        on_delete=models.CASCADE,
        related_name="answers",
    )
    question_id = models.BigIntegerField()

    selected_option_id = models.CharField(max_length=100, null=True, blank=True)
    answer_text = models.TextField(null=True, blank=True)
    answer_latex = models.TextField(null=True, blank=True)
    answer_numeric = models.FloatField(null=True, blank=True)
    answer_point = models.JSONField(null=True, blank=True)

    score = models.FloatField(null=True, blank=True)
    feedback = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "assignments_student_answer"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["assignment", "question_id"],
                name="uniq_answer_assignment_question",
            )
        ]

    def __str__(self):
        return f"Answer({self.id}) assignment={self.assignment_id} q={self.question_id}"


class AssignmentGrade(models.Model):
    """최종 성적 (배정 1:1). final_grade는 교사가 반올림한 값 그대로 저장."""

    class RoundingMethod(models.TextChoices):
        FLOOR = "floor", "Floor"
        CEIL = "ceil", "Ceil"
        ROUND = "round", "Round"

    assignment = models.OneToOneField(
        ExamAssignment,
        on_delete=models.CASCADE,
        related_name="grade",
    )
    average_score = models.FloatField()
    final_grade = models.FloatField()
    rounding_method = models.CharField(max_length=10, choices=RoundingMethod.choices)

    graded_at = models.DateTimeField(db_index=True)
    graded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        db_table = "assignments_grade"
        ordering = ["-graded_at"]

    def __str__(self):
        return f"Grade({self.assignment_id}) {self.final_grade}"
