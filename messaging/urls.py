"""
URL configuration for messaging app.

Maps views and ViewSets to URL patterns using DRF routers.
"""

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from . import views

app_name = 'messaging'

router = SimpleRouter()
router.register(r'reports', views.ContentReportViewSet, basename='report')

urlpatterns = [
    path('', views.send_message_view, name='message-send'),
    path('conversations/', views.conversations_view, name='conversation-list'),
    path('with/<uuid:user_id>/', views.conversation_view, name='conversation-detail'),
    path('<uuid:message_id>/read/', views.mark_read_view, name='message-read'),
    path('', include(router.urls)),
]
