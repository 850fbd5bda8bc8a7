# certificates/services/lookup.py
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from certificates.utils.spec_extractor import normalize_certificate_number


class ReportLookup(ABC):
    """Resolves a certificate number to the lab's report data."""

    @abstractmethod
    def find(self, certificate_number: str) -> Optional[Dict[str, Any]]:
        ...


class SampleReportLookup(ReportLookup):
    """
    Serves the same sample report for every well-formed number (8-12 digits,
    spaces and dashes ignored). Anything else is not found.

    TODO: replace with a lookup against the GIA Report Check API once
    credentials for it are provisioned.
    """

    SAMPLE_REPORT = {
        "shape": "Round Brilliant",
        "caratWeight": "1.01",
        "color": "F",
        "clarity": "VS1",
        "cut": "Excellent",
        "polish": "Excellent",
        "symmetry": "Excellent",
        "fluorescence": "None",
        "measurements": "6.47 x 6.50 x 4.01 mm",
    }

    def find(self, certificate_number: str) -> Optional[Dict[str, Any]]:
        number = normalize_certificate_number(certificate_number)
        if not (number.isdigit() and 8 <= len(number) <= 12):
            return None
        return dict(self.SAMPLE_REPORT)
