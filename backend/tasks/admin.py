from django.contrib import admin

from .models import Task


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('title', 'owner_id', 'importance', 'urgency', 'quadrant_title', 'completed')
    list_filter = ('completed',)
    search_fields = ('title', 'owner_id')
    ordering = ('owner_id', '-urgency', '-importance', 'id')

    @admin.display(description='Quadrant')
    def quadrant_title(self, obj):
        return obj.quadrant.title
