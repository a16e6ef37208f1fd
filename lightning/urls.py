"""
URL configuration for the lightning project.

Each app mounts its API routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'),
         name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),

    # API Routes
    path('api/v1/auth/', include('authentication.urls')),
    path('api/v1/profiles/', include('profiles.urls')),
    path('api/v1/connections/', include('connections.urls')),
    path('api/v1/testimonies/', include('testimonies.urls')),
    path('api/v1/messages/', include('messaging.urls')),
    path('api/v1/privacy/', include('privacy.urls')),
    path('api/v1/groups/', include('groups.urls')),
]
