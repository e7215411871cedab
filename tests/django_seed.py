"""DB 테스트용 시드 헬퍼 (pytest-django db fixture 안에서만 호출)."""
from apps.domains.exams.models import Exam, ExamQuestion, Question
from apps.domains.students.models import Group, GroupMembership, Student

MC_CONFIG = {
    "options": [
        {"id": "a", "text": "1 m/s", "is_correct": True, "order": 0},
        {"id": "b", "text": "2 m/s", "is_correct": False, "order": 1},
    ],
    "allow_multiple": False,
    "shuffle_options": False,
}


def seed_exam(teacher, title="Kinematics"):
    """MC(배점 3, 정답 a) + 서술형(배점 1). (exam, [mc, open_text]) 반환."""
    exam = Exam.objects.create(teacher=teacher, title=title, description="Unit 1", duration_minutes=30)
    mc = Question.objects.create(
        teacher=teacher,
        title="Speed",
        question_type=Question.QuestionType.MULTIPLE_CHOICE,
        type_config=MC_CONFIG,
    )
    essay = Question.objects.create(
        teacher=teacher,
        title="Explain",
        question_type=Question.QuestionType.OPEN_TEXT,
        type_config={"max_length": 500},
    )
    ExamQuestion.objects.create(exam=exam, question=mc, question_order=1, weight=3)
    ExamQuestion.objects.create(exam=exam, question=essay, question_order=2, weight=1)
    return exam, [mc, essay]


def seed_students(teacher, count=3, group_name=None):
    students = [
        Student.objects.create(
            teacher=teacher,
            full_name=f"Student {i}",
            email=f"Student{i}@School.test",
            career="Physics",
        )
        for i in range(1, count + 1)
    ]
    group = None
    if group_name:
        group = Group.objects.create(teacher=teacher, name=group_name)
        for s in students:
            GroupMembership.objects.create(group=group, student=s)
    return students, group
