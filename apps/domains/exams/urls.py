# apps/domains/exams/urls.py
from django.urls import path

from apps.domains.assignments.views import AssignExamView

urlpatterns = [
    path("<int:exam_id>/assign/", AssignExamView.as_view(), name="exam-assign"),
]
