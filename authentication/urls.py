"""
Authentication URL Configuration.

JWT token issue and refresh. Resource endpoints (profiles, connections,
testimonies, messages) live in their own apps.
"""

from django.urls import path
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core.api_tags import APITags

app_name = 'authentication'

TaggedTokenObtainPairView = extend_schema_view(
    post=extend_schema(tags=[APITags.AUTHENTICATION], summary="Obtain JWT pair"),
)(TokenObtainPairView)

TaggedTokenRefreshView = extend_schema_view(
    post=extend_schema(tags=[APITags.AUTHENTICATION], summary="Refresh access token"),
)(TokenRefreshView)

urlpatterns = [
    path('token/', TaggedTokenObtainPairView.as_view(), name='token-obtain'),
    path('token/refresh/', TaggedTokenRefreshView.as_view(), name='token-refresh'),
]
