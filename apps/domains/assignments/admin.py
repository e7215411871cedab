from django.contrib import admin
from .models import AssignmentGrade, ExamAssignment, StudentAnswer


@admin.register(ExamAssignment)
class ExamAssignmentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "exam",
        "student",
        "status",
        "assigned_at",
        "started_at",
        "submitted_at",
        "score",
    )
    list_filter = ("status",)
    search_fields = ("student__full_name", "student__email", "exam__title")
    # 토큰은 응시 링크 자격 증명: 화면에 노출하지 않음
    exclude = ("access_token",)
    readonly_fields = ("status", "started_at", "submitted_at", "score")

    def has_add_permission(self, request):
        # 배정 생성은 API(AssignExamService)로만
        return False


@admin.register(StudentAnswer)
class StudentAnswerAdmin(admin.ModelAdmin):
    list_display = ("id", "assignment", "question_id", "score", "created_at")


@admin.register(AssignmentGrade)
class AssignmentGradeAdmin(admin.ModelAdmin):
    list_display = ("id", "assignment", "final_grade", "rounding_method", "graded_at", "graded_by")
    list_filter = ("rounding_method",)
