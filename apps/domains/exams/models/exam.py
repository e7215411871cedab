from django.conf import settings
from django.db import models

from apps.api.common.models import TimestampModel


class Exam(TimestampModel):
    """
    시험 정의 (메타 정보 + 소유 교사)
    문항 구성은 ExamQuestion (배점/순서 포함)
    """

    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="exams",
    )

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)

    # 응시 화면 옵션 (문항 섞기 등) — 엔진은 해석하지 않고 그대로 전달
    config = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "exams_exam"
        ordering = ["-created_at"]

    def __str__(self):
        return self.title
