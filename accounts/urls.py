from django.urls import path

from . import views
from .csrf import csrf

app_name = "accounts"

urlpatterns = [
    path("auth/user/", views.current_user, name="current_user"),
    path("csrf/", csrf, name="csrf"),
]
