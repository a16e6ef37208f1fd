"""
Groups URL configuration.
"""

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import GroupViewSet

app_name = 'groups'

router = SimpleRouter()
router.register(r'', GroupViewSet, basename='group')

urlpatterns = [
    path('', include(router.urls)),
]
