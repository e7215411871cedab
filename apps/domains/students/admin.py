from django.contrib import admin
from .models import Group, GroupMembership, Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "full_name",
        "email",
        "year",
        "career",
        "teacher",
        "created_at",
    )
    list_filter = ("year", "career")
    search_fields = ("full_name", "email")


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "teacher", "created_at")
    search_fields = ("name",)


@admin.register(GroupMembership)
class GroupMembershipAdmin(admin.ModelAdmin):
    list_display = ("id", "group", "student", "joined_at")
