from django.urls import include, path

urlpatterns = [
    path("api/chat/", include("chat.urls")),
    path("api/", include("certificates.urls")),
    path("api/", include("accounts.urls")),
    path("", include("django_prometheus.urls")),
]
