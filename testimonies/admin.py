"""
Admin interface for testimonies app.
"""

from django.contrib import admin

from .models import Testimony, TestimonyComment, TestimonyLike, TestimonyView


class TestimonyCommentInline(admin.TabularInline):
    model = TestimonyComment
    extra = 0
    raw_id_fields = ['author']
    readonly_fields = ['created_at']


@admin.register(Testimony)
class TestimonyAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'visibility', 'word_count', 'created_at']
    list_filter = ['visibility', 'created_at']
    search_fields = ['title', 'content', 'user__username']
    readonly_fields = ['word_count', 'created_at', 'updated_at']
    raw_id_fields = ['user']
    inlines = [TestimonyCommentInline]


@admin.register(TestimonyLike)
class TestimonyLikeAdmin(admin.ModelAdmin):
    list_display = ['testimony', 'user', 'created_at']
    raw_id_fields = ['testimony', 'user']


@admin.register(TestimonyView)
class TestimonyViewAdmin(admin.ModelAdmin):
    list_display = ['testimony', 'viewer', 'viewed_at']
    raw_id_fields = ['testimony', 'viewer']
