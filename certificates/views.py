# certificates/views.py
import logging

from django.core.exceptions import ValidationError
from rest_framework.decorators import api_view, parser_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from accounts.utils import current_user_id
from chat.llm import LLMConfigError, LLMError
from chat.relay import relay_stream, sse_response
from utils.errors import error_response, validation_error

from .models import Analysis, Certificate
from .serializers import (
    AnalysisSerializer,
    AnalysisWithCertificateSerializer,
    CertificateNumberSerializer,
    CertificateSerializer,
    CertificateUploadSerializer,
    CertificateWithAnalysesSerializer,
)
from .services.analysis import AnalysisParseError, get_analyzer
from .services.lookup import SampleReportLookup
from .services.pdf_text import PdfTextError, extract_pdf_text, text_meta
from .utils.response_builders import (
    build_analysis_response,
    build_diagnostic_response,
    build_upstream_error_response,
)
from .utils.spec_extractor import extract_specs

log = logging.getLogger(__name__)

NO_FILE_ERROR = "No file provided"
PARSE_ERROR = "Failed to parse the PDF file. Please ensure it is a valid PDF."
EMPTY_TEXT_ERROR = "Could not extract text from the PDF. Please ensure it is a valid certificate."


def _read_certificate_text(request):
    """
    Validate the upload and pull its text.

    Returns (text, None) on success or (None, error Response).
    """
    if "file" not in request.FILES:
        return None, error_response(NO_FILE_ERROR, 400)

    ser = CertificateUploadSerializer(data=request.data)
    if not ser.is_valid():
        return None, error_response("Please upload a PDF file", 400, details=str(ser.errors.get("file", "")))

    upload = ser.validated_data["file"]
    log.info("processing upload name=%s type=%s size=%s", upload.name, upload.content_type, upload.size)

    try:
        text = extract_pdf_text(upload.read())
    except PdfTextError as e:
        return None, error_response(PARSE_ERROR, 400, details=str(e))

    if not text.strip():
        log.warning("extracted text is empty name=%s", upload.name)
        return None, error_response(EMPTY_TEXT_ERROR, 400)
    return text, None


@api_view(["POST"])
@parser_classes([MultiPartParser, FormParser])
def analyze_certificate(request):
    """
    Structured analysis of an uploaded certificate.

    `?mode=diagnostic` stops after text extraction and never calls the LLM.
    """
    text, err = _read_certificate_text(request)
    if err is not None:
        return err

    if request.query_params.get("mode") == "diagnostic":
        return build_diagnostic_response(text)

    fallback_specs = extract_specs(text).to_dict()

    try:
        analyzer = get_analyzer()
    except LLMConfigError as e:
        log.error("LLM not configured: %s", e)
        return build_upstream_error_response(str(e), text, fallback_specs)

    try:
        result = analyzer.analyze_structured(text)
    except AnalysisParseError as e:
        return build_upstream_error_response(
            "Failed to parse AI analysis. Please try again.", text, fallback_specs, details=str(e)
        )
    except LLMError as e:
        log.warning("certificate analysis failed: %s", e)
        return build_upstream_error_response(
            "Failed to analyze the certificate with AI. Please try again later.",
            text, fallback_specs, details=str(e),
        )

    return build_analysis_response(result, text)


@api_view(["POST"])
@parser_classes([MultiPartParser, FormParser])
def analyze_certificate_stream(request):
    """Narrative analysis of an uploaded certificate, streamed as `data:` events."""
    text, err = _read_certificate_text(request)
    if err is not None:
        return err

    try:
        chunks = get_analyzer().stream_narrative(text)
    except LLMConfigError as e:
        return error_response(str(e), 500, **text_meta(text))
    except LLMError as e:
        log.warning("narrative stream failed to start: %s", e)
        return error_response("Failed to process certificate", 500, details=str(e), **text_meta(text))

    return sse_response(relay_stream(chunks))


@api_view(["POST"])
@parser_classes([JSONParser, FormParser])
def analyze_certificate_number(request):
    ser = CertificateNumberSerializer(data=request.data)
    if not ser.is_valid():
        return error_response("No certificate number provided", 400)

    number = ser.validated_data["certificateNumber"].strip()
    report = SampleReportLookup().find(number)
    if report is None:
        return error_response("Certificate not found", 404)

    try:
        chunks = get_analyzer().stream_certificate_number(number, report)
    except LLMConfigError as e:
        return error_response(str(e), 500)
    except LLMError as e:
        log.warning("certificate-number stream failed to start: %s", e)
        return error_response("Failed to process certificate number", 500, details=str(e))

    return sse_response(relay_stream(chunks))


@api_view(["GET", "POST"])
def certificates(request):
    """POST: create a certificate row. GET: list a user's certificates with analyses."""
    if request.method == "POST":
        ser = CertificateSerializer(data=request.data)
        if not ser.is_valid():
            return validation_error(ser.errors)
        owner = ser.validated_data.pop("user_id", None) or current_user_id(request)
        cert = ser.save(user_id=owner)
        return Response(CertificateSerializer(cert).data, status=201)

    user_id = request.query_params.get("userId")
    if not user_id:
        return error_response("User ID is required", 400)
    try:
        qs = Certificate.objects.filter(user_id=user_id).prefetch_related("analyses")
        data = CertificateWithAnalysesSerializer(qs, many=True).data
    except (ValueError, ValidationError):
        return error_response("User ID is invalid", 400)
    return Response(data, status=200)


@api_view(["GET", "POST"])
def analyses(request):
    """POST: store an analysis. GET: latest analysis for a certificate."""
    if request.method == "POST":
        ser = AnalysisSerializer(data=request.data)
        if not ser.is_valid():
            return validation_error(ser.errors)
        owner = ser.validated_data.pop("user_id", None) or current_user_id(request)
        analysis = ser.save(user_id=owner)
        return Response(AnalysisWithCertificateSerializer(analysis).data, status=201)

    certificate_id = request.query_params.get("certificateId")
    if not certificate_id:
        return error_response("Certificate ID is required", 400)
    try:
        latest = (
            Analysis.objects.select_related("certificate")
            .filter(certificate_id=certificate_id)
            .order_by("-created_at")
            .first()
        )
    except (ValueError, ValidationError):
        return error_response("Certificate ID is invalid", 400)
    if latest is None:
        return error_response("Analysis not found", 404)
    return Response(AnalysisWithCertificateSerializer(latest).data, status=200)

