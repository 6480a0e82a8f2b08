"""URL configuration for the Touring project.

The `urlpatterns` list routes URLs to views. It includes both Django admin
and application‑level routers provided by Django Rest Framework and each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/', include('apps.bookings.urls')),
    path('api/', include('apps.bookings.experience_urls')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
]
