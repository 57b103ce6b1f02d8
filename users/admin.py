from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User

@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('email', 'full_name', 'username', 'is_admin', 'is_staff', 'date_joined')
    list_filter = ('is_admin', 'is_staff', 'is_superuser', 'is_active')
    search_fields = ('username', 'email', 'full_name')
    fieldsets = UserAdmin.fieldsets + (
        ('Hackathon', {'fields': ('full_name', 'is_admin', 'supabase_id')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Hackathon', {'fields': ('email', 'full_name', 'is_admin')}),
    )
