"""
URL configuration for the tasks app.
"""

from django.urls import path
from . import views

urlpatterns = [
    path('', views.api_info, name='api-info'),
    path('owners/<str:owner_id>/tasks/', views.task_list, name='task-list'),
    path('owners/<str:owner_id>/tasks/reorder/', views.reorder_tasks, name='reorder-tasks'),
    path('owners/<str:owner_id>/tasks/matrix/', views.quadrant_matrix, name='quadrant-matrix'),
    path('owners/<str:owner_id>/tasks/<int:task_id>/toggle/', views.toggle_task, name='toggle-task'),
]
