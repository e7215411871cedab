from django.conf import settings
from django.db import models
from django.db.models.functions import Lower

from apps.api.common.models import TimestampModel


class Student(TimestampModel):
    """
    교사 소유 학생 명단.
    이메일은 저장 시 소문자 정규화, 교사 단위 유일.
    """

    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="students",
    )

    full_name = models.CharField(max_length=200)
    email = models.EmailField(max_length=254)
    year = models.CharField(max_length=20, null=True, blank=True)
    career = models.CharField(max_length=100, null=True, blank=True)

    groups = models.ManyToManyField(
        "Group",
        through="GroupMembership",
        related_name="students",
        blank=True,
    )

    class Meta:
        db_table = "students_student"
        ordering = ["-id"]
        constraints = [
            models.UniqueConstraint(
                Lower("email"),
                "teacher",
                name="uniq_student_teacher_email",
            )
        ]

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.full_name} <{self.email}>"


# =========================
# Group
# =========================
class Group(TimestampModel):
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="student_groups",
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")

    class Meta:
        db_table = "students_group"
        ordering = ["name", "id"]

    def __str__(self):
        return self.name


class GroupMembership(models.Model):
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name="memberships")
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="memberships")
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "students_group_membership"
        constraints = [
            models.UniqueConstraint(
                fields=["group", "student"],
                name="uniq_group_student",
            )
        ]
