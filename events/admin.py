from django.contrib import admin
from .models import Registration, ScheduleItem


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'email', 'checked_in', 'school_name', 'registered_at')
    list_filter = ('checked_in', 'school_name', 't_shirt_size')
    search_fields = ('full_name', 'email', 'github_username')
    actions = ['mark_checked_in']

    @admin.action(description="Mark selected registrations as checked in")
    def mark_checked_in(self, request, queryset):
        # Saved one by one so the change feed sees each row
        for registration in queryset:
            registration.checked_in = True
            registration.save(update_fields=['checked_in'])


@admin.register(ScheduleItem)
class ScheduleItemAdmin(admin.ModelAdmin):
    list_display = ('title', 'type', 'start_time', 'end_time', 'location')
    list_filter = ('type',)
    search_fields = ('title', 'location')
    date_hierarchy = 'start_time'
