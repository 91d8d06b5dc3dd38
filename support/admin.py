from django.contrib import admin

from support.models import SupportTicket, TicketReply


class TicketReplyInline(admin.TabularInline):
    model = TicketReply
    extra = 0
    readonly_fields = ("user", "message", "created_at")


@admin.register(SupportTicket)
class SupportTicketAdmin(admin.ModelAdmin):
    list_display = ("subject", "user", "status", "priority", "created_at")
    list_filter = ("status", "priority")
    search_fields = ("subject", "user__email")
    readonly_fields = ("created_at", "updated_at", "cancelled_at")
    inlines = [TicketReplyInline]
