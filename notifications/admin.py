from django.contrib import admin
from .models import Notification, NotificationReceipt


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('title', 'scope', 'recipient', 'team', 'is_active', 'created_at')
    list_filter = ('scope', 'is_active')
    search_fields = ('title', 'message', 'recipient__email')
    raw_id_fields = ('recipient', 'team', 'created_by')


@admin.register(NotificationReceipt)
class NotificationReceiptAdmin(admin.ModelAdmin):
    list_display = ('notification', 'user', 'read_at')
    raw_id_fields = ('notification', 'user')
