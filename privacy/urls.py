"""
Privacy URL configuration.
"""

from django.urls import path

from . import views

app_name = 'privacy'

urlpatterns = [
    path('check/testimony/<uuid:user_id>/', views.check_testimony_view, name='check-testimony'),
    path('check/message/<uuid:user_id>/', views.check_message_view, name='check-message'),
    path('check/profile/<uuid:user_id>/', views.check_profile_view, name='check-profile'),
    path('rate-limits/', views.rate_limits_view, name='rate-limits'),
]
