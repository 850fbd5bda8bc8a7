from django.db import models
import uuid


class Certificate(models.Model):
    LAB_CHOICES = [("GIA", "GIA"), ("IGI", "IGI")]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(db_index=True)
    certificate_number = models.CharField(max_length=64)
    laboratory = models.CharField(max_length=8, choices=LAB_CHOICES, blank=True, default="")
    pdf_url = models.TextField(blank=True, default="")
    raw_data = models.TextField(blank=True, default="")
    carat = models.FloatField(null=True, blank=True)
    color = models.CharField(max_length=8, blank=True, default="")
    clarity = models.CharField(max_length=8, blank=True, default="")
    cut = models.CharField(max_length=32, blank=True, default="")
    polish = models.CharField(max_length=32, blank=True, default="")
    symmetry = models.CharField(max_length=32, blank=True, default="")
    fluorescence = models.CharField(max_length=32, blank=True, default="")
    measurements = models.CharField(max_length=64, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.laboratory or 'Certificate'} {self.certificate_number}"


class Analysis(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    certificate = models.ForeignKey(Certificate, on_delete=models.CASCADE, related_name="analyses")
    user_id = models.UUIDField(db_index=True)
    summary = models.TextField(blank=True, default="")
    strengths = models.JSONField(default=list, blank=True)
    concerns = models.JSONField(default=list, blank=True)
    value_assessment = models.TextField(blank=True, default="")
    questions = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
