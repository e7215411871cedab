# PATH: apps/domains/assignments/views.py
"""
시험 배정 / 응시 / 채점 API

- 응시자 엔드포인트(token/start/answer/submit): 인증 없음, 토큰 = 권한
- 교사 엔드포인트: JWT, 시험 소유 교사만
도메인 오류 → apps.api.common.exceptions.domain_exception_handler
"""
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from academy.domain.shared.patch import UNSET

from . import wiring
from .serializers import (
    AssignExamSerializer,
    AssignmentListQuerySerializer,
    FinalizeGradeSerializer,
    GradeAnswerSerializer,
    GradeListQuerySerializer,
    SaveAnswerSerializer,
    TokenSerializer,
)


class TokenAccessView(APIView):
    """capability 토큰 전용: 세션/JWT 인증 미사용 (CSRF 대상 아님)."""

    authentication_classes = []
    permission_classes = [AllowAny]


# ======================================================
# 응시자 (토큰)
# ======================================================

class AssignmentByTokenView(TokenAccessView):
    """GET /assignments/token/<token>/ — 문항 정답 정보 제거된 응시 화면 데이터."""

    def get(self, request, token):
        return Response(wiring.exam_session_service().get_by_token(token))


class StartAssignmentView(TokenAccessView):
    def post(self, request):
        s = TokenSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        assignment = wiring.exam_session_service().start(s.validated_data["token"])
        return Response(assignment.to_dict(include_token=False))


class SaveAnswerView(TokenAccessView):
    def post(self, request):
        s = SaveAnswerSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        answer = wiring.exam_session_service().save_answer(
            s.validated_data["token"],
            s.validated_data["question_id"],
            s.to_payload(),
        )
        return Response(answer.to_dict())


class SubmitAssignmentView(TokenAccessView):
    def post(self, request):
        s = TokenSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        assignment = wiring.exam_session_service().submit(s.validated_data["token"])
        return Response(assignment.to_dict(include_token=False))


# ======================================================
# 교사
# ======================================================

class AssignmentListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        q = AssignmentListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        rows = wiring.assignment_queries().list_assignments(
            request.user.id,
            exam_id=q.validated_data.get("exam_id"),
            student_id=q.validated_data.get("student_id"),
            status=q.validated_data.get("status") or None,
        )
        return Response(rows)


class AssignmentDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, assignment_id):
        return Response(wiring.assignment_queries().get_detail(request.user.id, assignment_id))


class AssignmentGradingView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, assignment_id):
        return Response(wiring.assignment_queries().get_grading_view(request.user.id, assignment_id))


class AssignExamView(APIView):
    """POST /exams/<exam_id>/assign/ — student_ids 또는 group_id 중 하나."""

    permission_classes = [IsAuthenticated]

    def post(self, request, exam_id):
        s = AssignExamSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        result = wiring.assign_exam_service().assign(
            request.user.id,
            exam_id,
            student_ids=s.validated_data.get("student_ids") or None,
            group_id=s.validated_data.get("group_id"),
        )
        return Response(result.to_dict(), status=status.HTTP_201_CREATED)


class GradeListCreateView(APIView):
    """GET: 성적 목록 / POST: 최종 성적 기록 (submitted → graded)."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        q = GradeListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        rows = wiring.assignment_queries().list_grades(
            request.user.id,
            student_id=q.validated_data.get("student_id"),
            group_id=q.validated_data.get("group_id"),
            career=q.validated_data.get("career") or None,
        )
        return Response(rows)

    def post(self, request):
        s = FinalizeGradeSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        grade = wiring.grade_recorder().finalize(
            request.user.id,
            data["assignment_id"],
            data["average_score"],
            data["final_grade"],
            data["rounding_method"],
        )
        return Response(grade.to_dict(), status=status.HTTP_201_CREATED)


class GradeAnswerView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, answer_id):
        s = GradeAnswerSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        answer = wiring.grade_recorder().grade_answer(
            request.user.id,
            answer_id,
            s.validated_data["score"],
            s.validated_data.get("feedback", UNSET),
        )
        return Response(answer.to_dict())
