from django.contrib import admin
from .models import Exam, ExamQuestion, Question


class ExamQuestionInline(admin.TabularInline):
    model = ExamQuestion
    extra = 0


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "teacher", "duration_minutes", "created_at")
    search_fields = ("title",)
    inlines = [ExamQuestionInline]


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "question_type", "teacher", "difficulty")
    list_filter = ("question_type",)
    search_fields = ("title",)
