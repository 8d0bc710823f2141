from django.contrib import admin
from .models import Conversation, Message


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ['sender', 'content', 'read', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ['id', 'hospital', 'blood_bank', 'emergency_post', 'updated_at']
    search_fields = ['hospital__email', 'blood_bank__email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    autocomplete_fields = ['hospital', 'blood_bank']
    inlines = [MessageInline]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ['conversation', 'sender', 'read', 'created_at']
    list_filter = ['read']
    search_fields = ['sender__email']
    readonly_fields = ['id', 'created_at']
