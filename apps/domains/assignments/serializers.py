# PATH: apps/domains/assignments/serializers.py
# 입력 형태 검증만 담당. 도메인 규칙(상태/소유/응답 필드 1개)은 use case에서.
from rest_framework import serializers

from academy.domain.assignments.entities import AnswerPayload


class TokenSerializer(serializers.Serializer):
    # 형식 검사는 use case에서 (잘못된 토큰과 없는 토큰 응답을 같게)
    token = serializers.CharField(allow_blank=True, trim_whitespace=False)


class SaveAnswerSerializer(TokenSerializer):
    question_id = serializers.IntegerField(min_value=1)

    selected_option_id = serializers.CharField(required=False, allow_null=True, max_length=100)
    answer_text = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)
    answer_latex = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)
    answer_numeric = serializers.FloatField(required=False, allow_null=True)
    answer_point = serializers.JSONField(required=False, allow_null=True)

    def to_payload(self) -> AnswerPayload:
        data = self.validated_data
        return AnswerPayload(
            selected_option_id=data.get("selected_option_id"),
            answer_text=data.get("answer_text"),
            answer_latex=data.get("answer_latex"),
            answer_numeric=data.get("answer_numeric"),
            answer_point=data.get("answer_point"),
        )


class AssignExamSerializer(serializers.Serializer):
    student_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        allow_empty=True,
    )
    group_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class FinalizeGradeSerializer(serializers.Serializer):
    assignment_id = serializers.IntegerField(min_value=1)
    average_score = serializers.FloatField()
    final_grade = serializers.FloatField()
    rounding_method = serializers.CharField(max_length=10)


class GradeAnswerSerializer(serializers.Serializer):
    """feedback 키가 없으면 기존 값 유지, null이면 비움."""

    score = serializers.FloatField()
    feedback = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)


class AssignmentListQuerySerializer(serializers.Serializer):
    exam_id = serializers.IntegerField(required=False, min_value=1)
    student_id = serializers.IntegerField(required=False, min_value=1)
    status = serializers.CharField(required=False, allow_blank=True)


class GradeListQuerySerializer(serializers.Serializer):
    student_id = serializers.IntegerField(required=False, min_value=1)
    group_id = serializers.IntegerField(required=False, min_value=1)
    career = serializers.CharField(required=False, allow_blank=True)
