"""Root URL configuration.

The drive core is transport-agnostic; only the admin is routed here.
"""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    path('admin/', admin.site.urls),
]
