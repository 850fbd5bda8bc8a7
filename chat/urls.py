from django.urls import path

from . import views

app_name = "chat"

urlpatterns = [
    path("", views.chat, name="chat"),

    # Persistence
    path("sessions/", views.sessions, name="sessions"),
    path("sessions/<uuid:sid>/messages/", views.append_message, name="append_message"),
]
