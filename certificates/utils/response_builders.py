from typing import Any, Dict

from rest_framework.response import Response

from certificates.services.analysis import StructuredAnalysis
from certificates.services.pdf_text import text_meta
from chat.prompts import QUICK_QUESTIONS
from utils.errors import error_response


def build_analysis_response(result: StructuredAnalysis, certificate_text: str) -> Response:
    body: Dict[str, Any] = {
        "message": "Certificate analyzed successfully",
        "analysis": result.analysis,
        "specifications": result.specifications.to_dict(),
        "specificationsSource": result.specs_source,
        "certificateText": certificate_text,
        "quickQuestions": list(QUICK_QUESTIONS),
        **text_meta(certificate_text),
    }
    if result.warnings:
        body["warnings"] = result.warnings
    return Response(body, status=200)


def build_diagnostic_response(certificate_text: str) -> Response:
    return Response(
        {"message": "PDF text extracted successfully", **text_meta(certificate_text)},
        status=200,
    )


def build_upstream_error_response(
    error: str, certificate_text: str, specifications: dict, details: str = None, status: int = 500
) -> Response:
    return error_response(
        error,
        status,
        details=details,
        specifications=specifications,
        **text_meta(certificate_text),
    )
