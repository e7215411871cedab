# PATH: apps/domains/students/serializers.py
# 일괄 등록 입력 형태 검증. 행 단위 검증(이름/이메일 형식)은 use case에서 행 오류로 수집.
from rest_framework import serializers

from academy.domain.students.entities import StudentRecord


class GroupIdsField(serializers.ListField):
    """multipart 폼에서 "1,2,3" 문자열도 허용."""

    child = serializers.IntegerField(min_value=1)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = [data]
        if isinstance(data, (list, tuple)):
            flat = []
            for item in data:
                if isinstance(item, str):
                    flat.extend(p.strip() for p in item.split(",") if p.strip())
                else:
                    flat.append(item)
            data = flat
        return super().to_internal_value(data)


class StudentRowSerializer(serializers.Serializer):
    full_name = serializers.CharField(required=False, allow_blank=True, default="")
    email = serializers.CharField(required=False, allow_blank=True, default="")
    year = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    career = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    group_ids = GroupIdsField(required=False, default=list)

    def to_internal_value(self, data):
        # 프론트 camelCase 키 허용
        if isinstance(data, dict) and "fullName" in data and "full_name" not in data:
            data = dict(data)
            data["full_name"] = data.pop("fullName")
        if isinstance(data, dict) and "groupIds" in data and "group_ids" not in data:
            data = dict(data)
            data["group_ids"] = data.pop("groupIds")
        return super().to_internal_value(data)


class StudentBatchSerializer(serializers.Serializer):
    """POST body: { "students": [ {...}, ... ], "group_ids": [..] (선택, 전체 행 적용) }"""

    students = StudentRowSerializer(many=True, allow_empty=True)
    group_ids = GroupIdsField(required=False, default=list)

    def to_records(self) -> list[StudentRecord]:
        batch_groups = list(self.validated_data.get("group_ids") or [])
        records = []
        for row in self.validated_data["students"]:
            group_ids = list(dict.fromkeys(list(row.get("group_ids") or []) + batch_groups))
            records.append(
                StudentRecord(
                    full_name=row.get("full_name") or "",
                    email=row.get("email") or "",
                    year=row.get("year") or None,
                    career=row.get("career") or None,
                    group_ids=tuple(group_ids),
                )
            )
        return records


class StudentFileImportSerializer(serializers.Serializer):
    """multipart: file + group_ids (선택)"""

    file = serializers.FileField()
    group_ids = GroupIdsField(required=False, default=list)
