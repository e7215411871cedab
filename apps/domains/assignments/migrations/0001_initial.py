# Generated manually: exam assignments (capability token) + answers + final grades

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("exams", "0001_initial"),
        ("students", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ExamAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("access_token", models.CharField(db_index=True, max_length=64, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_progress", "In progress"),
                            ("submitted", "Submitted"),
                            ("graded", "Graded"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("assigned_at", models.DateTimeField()),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("score", models.FloatField(blank=True, null=True)),
                (
                    "exam",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="exams.exam",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="exam_assignments",
                        to="students.student",
                    ),
                ),
            ],
            options={
                "db_table": "assignments_exam_assignment",
                "ordering": ["-assigned_at", "-id"],
            },
        ),
        migrations.AddConstraint(
            model_name="examassignment",
            constraint=models.UniqueConstraint(fields=("exam", "student"), name="uniq_assignment_exam_student"),
        ),
        migrations.CreateModel(
            name="StudentAnswer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("question_id", models.BigIntegerField()),
                ("selected_option_id", models.CharField(blank=True, max_length=100, null=True)),
                ("answer_text", models.TextField(blank=True, null=True)),
                ("answer_latex", models.TextField(blank=True, null=True)),
                ("answer_numeric", models.FloatField(blank=True, null=True)),
                ("answer_point", models.JSONField(blank=True, null=True)),
                ("score", models.FloatField(blank=True, null=True)),
                ("feedback", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="answers",
                        to="assignments.examassignment",
                    ),
                ),
            ],
            options={
                "db_table": "assignments_student_answer",
                "ordering": ["id"],
            },
        ),
        migrations.AddConstraint(
            model_name="studentanswer",
            constraint=models.UniqueConstraint(
                fields=("assignment", "question_id"),
                name="uniq_answer_assignment_question",
            ),
        ),
        migrations.CreateModel(
            name="AssignmentGrade",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("average_score", models.FloatField()),
                ("final_grade", models.FloatField()),
                (
                    "rounding_method",
                    models.CharField(
                        choices=[("floor", "Floor"), ("ceil", "Ceil"), ("round", "Round")],
                        max_length=10,
                    ),
                ),
                ("graded_at", models.DateTimeField(db_index=True)),
                (
                    "assignment",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="grade",
                        to="assignments.examassignment",
                    ),
                ),
                (
                    "graded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "assignments_grade",
                "ordering": ["-graded_at"],
            },
        ),
    ]
