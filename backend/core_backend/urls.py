"""
URL configuration for core_backend project.

/api/delivery/  fee quotes, postcode checks, delivery configuration
/api/orders/    order intake, lookup, status changes and stats
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/delivery/", include("delivery.urls")),
    path("api/orders/", include("orders.urls")),
]
