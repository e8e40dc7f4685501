from django.conf import settings
from django.contrib import admin
from django.contrib.staticfiles.urls import staticfiles_urlpatterns
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    # Both apps mount at the root; their urls.py add the manager/ and employee/ prefixes.
    path("", include("apps.accounts.urls")),
    path("", include("apps.scheduling.urls")),
]

if settings.DEBUG:
    urlpatterns += staticfiles_urlpatterns()
