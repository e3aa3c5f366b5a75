from django.contrib import admin
from django.urls import path

admin.site.site_header = "feedhub"
admin.site.site_title = "feedhub admin"

urlpatterns = [
    path("admin/", admin.site.urls),
]
