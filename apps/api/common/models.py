# PATH: apps/api/common/models.py
from django.db import models


class TimestampModel(models.Model):
    """
    created_at / updated_at 자동 기록 (시험, 문항, 학생, 그룹, 배정 공통)

    응답(StudentAnswer)은 created_at을 직접 지정하므로 상속하지 않는다.
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
