from django.urls import path

from . import views

app_name = "certificates"

urlpatterns = [
    path("analyze/", views.analyze_certificate, name="analyze"),
    path("analyze/stream/", views.analyze_certificate_stream, name="analyze_stream"),
    path("analyze/certificate-number/", views.analyze_certificate_number, name="analyze_certificate_number"),
    path("certificates/", views.certificates, name="certificates"),
    path("analyses/", views.analyses, name="analyses"),
]
