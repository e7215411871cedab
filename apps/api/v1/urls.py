# apps/api/v1/urls.py
from django.urls import path, include

from apps.domains.assignments.urls import assignment_urlpatterns, grade_urlpatterns

urlpatterns = [
    # =========================
    # Domain APIs
    # =========================
    path("students/", include("apps.domains.students.urls")),
    path("exams/", include("apps.domains.exams.urls")),

    # 배정 / 응시 / 채점
    path("assignments/", include(assignment_urlpatterns)),
    path("grades/", include(grade_urlpatterns)),
]
