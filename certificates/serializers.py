from rest_framework import serializers

from .models import Analysis, Certificate
from .services.pdf_text import PDF_MIME_TYPES


class CertificateUploadSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, f):
        content_type = (getattr(f, "content_type", "") or "").split(";")[0].strip().lower()
        if content_type not in PDF_MIME_TYPES:
            raise serializers.ValidationError("Please upload a PDF file")
        return f


class CertificateNumberSerializer(serializers.Serializer):
    certificateNumber = serializers.CharField(max_length=64)


# ----- structured LLM response schema -----

def _text(**kwargs):
    return serializers.CharField(allow_blank=True, trim_whitespace=False, **kwargs)


class SpecificationsSerializer(serializers.Serializer):
    carat = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    color = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    clarity = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    cut = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    certificateNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    laboratory = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    type = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class DetailedAnalysisSerializer(serializers.Serializer):
    cut = _text()
    color = _text()
    clarity = _text()
    carat = _text()


class AnalysisPayloadSerializer(serializers.Serializer):
    overview = _text()
    detailedAnalysis = DetailedAnalysisSerializer()
    notableFeatures = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    potentialConcerns = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    questionsForJeweler = serializers.ListField(child=serializers.CharField(), required=False, default=list)


# ----- persistence -----

class CertificateSerializer(serializers.ModelSerializer):
    certificateNumber = serializers.CharField(source="certificate_number", max_length=64)
    pdfUrl = serializers.CharField(source="pdf_url", required=False, allow_blank=True, default="")
    rawData = serializers.CharField(source="raw_data", required=False, allow_blank=True, default="",
                                    trim_whitespace=False)
    userId = serializers.UUIDField(source="user_id", required=False)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Certificate
        fields = [
            "id", "certificateNumber", "laboratory", "pdfUrl", "rawData",
            "carat", "color", "clarity", "cut", "polish", "symmetry",
            "fluorescence", "measurements", "userId", "createdAt", "updatedAt",
        ]

    def validate_laboratory(self, value):
        if value and value not in dict(Certificate.LAB_CHOICES):
            raise serializers.ValidationError("laboratory must be GIA or IGI")
        return value


class AnalysisSerializer(serializers.ModelSerializer):
    certificateId = serializers.PrimaryKeyRelatedField(
        source="certificate", queryset=Certificate.objects.all()
    )
    valueAssessment = serializers.CharField(source="value_assessment", required=False, allow_blank=True, default="")
    strengths = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    concerns = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    questions = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    userId = serializers.UUIDField(source="user_id", required=False)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Analysis
        fields = [
            "id", "certificateId", "summary", "strengths", "concerns",
            "valueAssessment", "questions", "userId", "createdAt",
        ]


class CertificateWithAnalysesSerializer(CertificateSerializer):
    analyses = AnalysisSerializer(many=True, read_only=True)

    class Meta(CertificateSerializer.Meta):
        fields = CertificateSerializer.Meta.fields + ["analyses"]


class AnalysisWithCertificateSerializer(AnalysisSerializer):
    certificate = CertificateSerializer(read_only=True)

    class Meta(AnalysisSerializer.Meta):
        fields = AnalysisSerializer.Meta.fields + ["certificate"]
