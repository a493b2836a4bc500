from django.contrib import admin

from .models import Task


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('title', 'user', 'priority', 'status', 'start_time', 'end_time')
    list_filter = ('status', 'priority')
    search_fields = ('title',)
