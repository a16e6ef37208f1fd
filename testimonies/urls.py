"""
Testimonies URL configuration.
"""

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import TestimonyViewSet

app_name = 'testimonies'

router = SimpleRouter()
router.register(r'', TestimonyViewSet, basename='testimony')

urlpatterns = [
    path('', include(router.urls)),
]
