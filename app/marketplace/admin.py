"""
Django admin configuration for marketplace models.
"""

from django.contrib import admin

from marketplace.models import Review, Task, TaskAssignment


class TaskAssignmentInline(admin.TabularInline):
    model = TaskAssignment
    extra = 0
    raw_id_fields = ["client", "contractor"]


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ["title", "owner", "category", "price", "status", "created_at"]
    list_filter = ["status", "category", "created_at"]
    search_fields = ["title", "slug", "owner__email"]
    prepopulated_fields = {"slug": ("title",)}
    raw_id_fields = ["owner"]
    inlines = [TaskAssignmentInline]
    ordering = ["-created_at"]


@admin.register(TaskAssignment)
class TaskAssignmentAdmin(admin.ModelAdmin):
    list_display = ["task", "client", "contractor", "status", "created_at"]
    list_filter = ["status"]
    search_fields = ["task__title", "client__email", "contractor__email"]
    raw_id_fields = ["task", "client", "contractor"]


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ["task", "reviewer", "reviewee", "rating", "created_at"]
    list_filter = ["rating"]
    raw_id_fields = ["task", "reviewer", "reviewee"]
