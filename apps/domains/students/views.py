# PATH: apps/domains/students/views.py
"""
학생 일괄 등록 API (JSON / CSV / Excel)

모두 부분 성공: 응답 { created, failed, errors[{row, email, full_name, error}], created_ids }
그룹 소유 검증 실패 등 배치 선행 조건 위반은 전체 실패 (도메인 오류 → 4xx).
"""
from django.conf import settings

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.domains.assignments import wiring
from .serializers import StudentBatchSerializer, StudentFileImportSerializer


def _read_upload(upload_file) -> bytes:
    max_bytes = int(getattr(settings, "STUDENT_IMPORT_MAX_BYTES", 5 * 1024 * 1024))
    size = getattr(upload_file, "size", None)
    if size is not None and size > max_bytes:
        raise ValidationError({"detail": f"file is too large (max {max_bytes} bytes)"})
    return upload_file.read()


class StudentBatchCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        s = StudentBatchSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        result = wiring.student_import_service().create_batch(request.user.id, s.to_records())
        return Response(result.to_dict(), status=status.HTTP_201_CREATED)


class StudentCsvImportView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        s = StudentFileImportSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        content = _read_upload(s.validated_data["file"])
        result = wiring.student_import_service().import_csv(
            request.user.id,
            content,
            s.validated_data.get("group_ids") or [],
        )
        return Response(result.to_dict(), status=status.HTTP_201_CREATED)


class StudentExcelImportView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        s = StudentFileImportSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        content = _read_upload(s.validated_data["file"])
        result = wiring.student_import_service().import_excel(
            request.user.id,
            content,
            s.validated_data.get("group_ids") or [],
        )
        return Response(result.to_dict(), status=status.HTTP_201_CREATED)
