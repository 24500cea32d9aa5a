from django.contrib import admin

from logistics.store import get_store_client
from .models import ContactMessage, ContactMessageStatus
from .services import ContactService


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ('subject', 'name', 'email', 'phone', 'status', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('name', 'email', 'subject', 'message')
    readonly_fields = ('id', 'name', 'email', 'phone', 'subject', 'message', 'created_at')
    ordering = ('-created_at',)
    actions = ['mark_as_read', 'mark_as_answered', 'archive']

    def has_add_permission(self, request):
        return False

    def _set_status(self, request, queryset, status):
        updated = ContactService(get_store_client()).set_status(
            queryset.values_list('pk', flat=True), status
        )
        self.message_user(request, f"{updated} message(s) updated.")

    @admin.action(description="Mark as read")
    def mark_as_read(self, request, queryset):
        self._set_status(request, queryset, ContactMessageStatus.READ)

    @admin.action(description="Mark as answered")
    def mark_as_answered(self, request, queryset):
        self._set_status(request, queryset, ContactMessageStatus.ANSWERED)

    @admin.action(description="Archive")
    def archive(self, request, queryset):
        self._set_status(request, queryset, ContactMessageStatus.ARCHIVED)
