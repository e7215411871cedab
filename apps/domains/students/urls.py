# apps/domains/students/urls.py
from django.urls import path

from .views import StudentBatchCreateView, StudentCsvImportView, StudentExcelImportView

urlpatterns = [
    path("batch/", StudentBatchCreateView.as_view(), name="student-batch-create"),
    path("import/csv/", StudentCsvImportView.as_view(), name="student-import-csv"),
    path("import/excel/", StudentExcelImportView.as_view(), name="student-import-excel"),
]
