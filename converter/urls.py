from django.urls import path, re_path

from .views import IndexView, UploadView, converted_file

urlpatterns = [
    path("", IndexView.as_view(), name="index"),
    path("uploads", UploadView.as_view(), name="uploads"),
    re_path(r"^uploads/converted/(?P<path>.*)$", converted_file, name="converted"),
]
