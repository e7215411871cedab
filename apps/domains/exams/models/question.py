from django.conf import settings
from django.db import models

from apps.api.common.models import TimestampModel


class Question(TimestampModel):
    """
    문제은행 문항 (교사 소유)
    type_config: 유형별 설정 JSON (정답키 포함). 도메인 진입 시 유형별 dataclass로 디코딩
    """

    class QuestionType(models.TextChoices):
        MULTIPLE_CHOICE = "multiple_choice", "Multiple choice"
        NUMERIC = "numeric", "Numeric"
        GRAPH_CLICK = "graph_click", "Graph click"
        OPEN_TEXT = "open_text", "Open text"

    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="questions",
    )

    title = models.CharField(max_length=255)
    content = models.TextField(blank=True, default="")
    question_type = models.CharField(max_length=30, choices=QuestionType.choices)
    type_config = models.JSONField(default=dict, blank=True)
    difficulty = models.CharField(max_length=20, null=True, blank=True)

    class Meta:
        db_table = "exams_question"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.title} ({self.question_type})"


class ExamQuestion(models.Model):
    """
    시험 ↔ 문항 연결. 시험별 배점(weight) / 순서(question_order)
    """

    exam = models.ForeignKey(
        "exams.Exam",
        on_delete=models.CASCADE,
        related_name="exam_questions",
    )
    question = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name="exam_links",
    )

    question_order = models.PositiveIntegerField(default=0)
    weight = models.FloatField(default=1.0)

    class Meta:
        db_table = "exams_exam_question"
        ordering = ["question_order", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["exam", "question"],
                name="uniq_exam_question",
            )
        ]

    def __str__(self):
        return f"{self.exam_id} Q{self.question_order}"
