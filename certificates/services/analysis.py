# certificates/services/analysis.py
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator

from chat.llm import LLMClient, LLMResponseError, build_client_from_settings, try_parse_json
from certificates.serializers import AnalysisPayloadSerializer, SpecificationsSerializer
from certificates.utils.spec_extractor import (
    CertificateSpecs,
    extract_specs,
    merge_specs,
    specs_from_payload,
)

logger = logging.getLogger(__name__)

ANALYST_SYSTEM = "You are an expert diamond analyst helping customers understand diamond certificates."
JSON_SYSTEM = ANALYST_SYSTEM + " Always return responses in valid JSON format."

NARRATIVE_SECTIONS = (
    "Overview",
    "Detailed Analysis of 4Cs",
    "Notable Features",
    "Potential Concerns",
    "Questions for the Jeweler",
)


class AnalysisParseError(LLMResponseError):
    ...


@dataclass
class StructuredAnalysis:
    specifications: CertificateSpecs
    analysis: Dict[str, Any]
    specs_source: str = "llm"
    warnings: list = field(default_factory=list)


def _sections() -> str:
    return "\n".join(f"{i}. {name}" for i, name in enumerate(NARRATIVE_SECTIONS, start=1))


def structured_prompt(certificate_text: str) -> str:
    return f"""You are an expert diamond analyst. First, extract the key specifications from this certificate, then provide a detailed analysis.

Certificate text:
{certificate_text}

Please structure your response in JSON format with the following sections:
{{
  "specifications": {{
    "carat": "numeric value",
    "color": "letter grade",
    "clarity": "clarity grade",
    "cut": "cut grade",
    "certificateNumber": "number",
    "laboratory": "GIA or IGI",
    "type": "Natural or Lab-Grown"
  }},
  "analysis": {{
    "overview": "Brief summary of key characteristics",
    "detailedAnalysis": {{
      "cut": "Explanation of cut grade",
      "color": "Explanation of color grade",
      "clarity": "Explanation of clarity grade",
      "carat": "Explanation of carat weight"
    }},
    "notableFeatures": ["List of special characteristics"],
    "potentialConcerns": ["List of areas needing attention"],
    "questionsForJeweler": ["List of suggested questions"]
  }}
}}

Extract all specifications precisely as they appear in the certificate. For the analysis sections, use plain language that a non-expert can understand. If you notice any unusual or noteworthy specifications, explain their significance."""


def narrative_prompt(certificate_block: str) -> str:
    return f"""Analyze this diamond certificate and provide a detailed but easy-to-understand explanation of the diamond's characteristics. Focus on the 4Cs (Cut, Color, Clarity, and Carat) and highlight any notable features or concerns. Also suggest questions the buyer should ask the jeweler.

{certificate_block}

Please structure your response in the following sections:
{_sections()}"""


def _user(text: str) -> list:
    return [{"role": "user", "parts": [text]}]


class CertificateAnalyzer:
    """Single-shot certificate analysis. No retries; failures go to the caller."""

    def __init__(self, llm: LLMClient):
        self.llm = llm

    def analyze_structured(self, certificate_text: str) -> StructuredAnalysis:
        raw = self.llm.complete(JSON_SYSTEM, _user(structured_prompt(certificate_text)), json_mode=True)

        obj = try_parse_json(raw)
        if not isinstance(obj, dict):
            logger.warning("invalid_json raw=%s", raw[:300])
            raise AnalysisParseError("invalid_json")

        analysis = AnalysisPayloadSerializer(data=obj.get("analysis"))
        if not analysis.is_valid():
            logger.warning("analysis schema mismatch: %s", analysis.errors)
            raise AnalysisParseError(f"bad_schema: {json.dumps(analysis.errors)}")

        fallback = extract_specs(certificate_text)
        result = StructuredAnalysis(specifications=fallback, analysis=dict(analysis.validated_data))

        specs = SpecificationsSerializer(data=obj.get("specifications"))
        if specs.is_valid():
            from_llm = specs_from_payload(specs.validated_data)
            merged = merge_specs(from_llm, fallback)
            result.specifications = merged
            if merged != from_llm:
                result.specs_source = "merged"
        else:
            logger.info("specifications missing or malformed, using text extraction: %s", specs.errors)
            result.specs_source = "text"
            result.warnings.append("specifications extracted from certificate text")
        return result

    def stream_narrative(self, certificate_text: str) -> Iterator[str]:
        prompt = narrative_prompt(f"Certificate text:\n{certificate_text}")
        return self.llm.stream(ANALYST_SYSTEM, _user(prompt))

    def stream_certificate_number(self, certificate_number: str, report: Dict[str, Any]) -> Iterator[str]:
        block = (
            f"Certificate Number: {certificate_number}\n"
            f"Certificate Data:\n{json.dumps(report, indent=2)}"
        )
        return self.llm.stream(ANALYST_SYSTEM, _user(narrative_prompt(block)))


def get_analyzer() -> CertificateAnalyzer:
    return CertificateAnalyzer(llm=build_client_from_settings())
