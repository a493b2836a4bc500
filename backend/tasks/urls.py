"""
URL configuration for the tasks app.
"""

from django.urls import path
from . import views

urlpatterns = [
    path('', views.api_info, name='api-info'),
    path('tasks/', views.task_list, name='task-list'),
    path('tasks/stats/', views.task_stats, name='task-stats'),
    path('tasks/stats/summary/', views.task_time_summary, name='task-time-summary'),
    path('tasks/bulk-delete/', views.bulk_delete_tasks, name='task-bulk-delete'),
    path('tasks/<int:task_id>/', views.task_detail, name='task-detail'),
]
