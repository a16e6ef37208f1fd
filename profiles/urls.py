"""
Profiles URL configuration.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ChurchViewSet, UserProfileViewSet, user_profile_view

app_name = 'profiles'

router = DefaultRouter()
router.register(r'churches', ChurchViewSet, basename='church')

urlpatterns = [
    # Current user profile management
    path('me/', UserProfileViewSet.as_view({
        'get': 'retrieve',
        'patch': 'partial_update'
    }), name='profile-me'),

    path('', include(router.urls)),

    # Other users' profiles
    path('<uuid:user_id>/', user_profile_view, name='user-profile'),
]
