# apps/domains/assignments/urls.py
from django.urls import path

from .views import (
    AssignmentByTokenView,
    AssignmentDetailView,
    AssignmentGradingView,
    AssignmentListView,
    GradeAnswerView,
    GradeListCreateView,
    SaveAnswerView,
    StartAssignmentView,
    SubmitAssignmentView,
)

# /api/v1/assignments/
assignment_urlpatterns = [
    path("", AssignmentListView.as_view(), name="assignment-list"),
    path("<int:assignment_id>/", AssignmentDetailView.as_view(), name="assignment-detail"),
    path("<int:assignment_id>/grading/", AssignmentGradingView.as_view(), name="assignment-grading"),

    # 응시자 (토큰)
    path("token/<path:token>/", AssignmentByTokenView.as_view(), name="assignment-by-token"),
    path("start/", StartAssignmentView.as_view(), name="assignment-start"),
    path("answer/", SaveAnswerView.as_view(), name="assignment-answer"),
    path("submit/", SubmitAssignmentView.as_view(), name="assignment-submit"),
]

# /api/v1/grades/
grade_urlpatterns = [
    path("", GradeListCreateView.as_view(), name="grade-list"),
    path("answers/<int:answer_id>/", GradeAnswerView.as_view(), name="grade-answer"),
]
