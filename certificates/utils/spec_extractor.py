"""
Best-effort extraction of diamond specifications from certificate text.

Each field has an ordered list of patterns; the first plausible match wins
and a field with no match keeps its empty default. Nothing in here raises on
odd input.
"""
import re
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

# A certificate quoting both labs resolves to the first entry.
LAB_PRECEDENCE = ("GIA", "IGI")

COLOR_GRADES = tuple("DEFGHIJK")
CLARITY_GRADES = ("FL", "IF", "VVS1", "VVS2", "VS1", "VS2", "SI1", "SI2", "I1", "I2", "I3")
CUT_GRADES = ("Excellent", "Very Good", "Good", "Fair", "Poor")

NATURAL = "Natural"
LAB_GROWN = "Lab-Grown"

MAX_PLAUSIBLE_CARAT = 100.0

_NUM = r"(\d{1,3}(?:[.,]\d{1,3})?)"
_COLOR = r"((?-i:[D-K]))"
_CLARITY = r"(VVS[12]|VS[12]|SI[12]|I[123]|FL|IF)"
_CUT = r"(excellent|very\s+good|good|fair|poor)"

CARAT_PATTERNS = [
    re.compile(r"carat\s+weight\s*[:\-]?\s*" + _NUM, re.I),
    re.compile(r"weight\s*[:\-]?\s*" + _NUM, re.I),
    re.compile(r"carats?\s*[:\-]?\s*" + _NUM, re.I),
    re.compile(_NUM + r"\s*(?:carats?|cts?)\b", re.I),
]

COLOR_PATTERNS = [
    re.compile(r"colou?r(?:\s+grade)?\s*[:\-]?\s*" + _COLOR + r"(?![A-Za-z])", re.I),
    re.compile(r"(?<![A-Za-z])" + _COLOR + r"\s*[-(]?\s*colou?r\b", re.I),
]

CLARITY_PATTERNS = [
    re.compile(r"clarity(?:\s+grade)?\s*[:\-]?\s*" + _CLARITY + r"\b", re.I),
    re.compile(r"\b" + _CLARITY + r"\s+clarity\b", re.I),
]

CUT_PATTERNS = [
    re.compile(r"\bcut(?:\s+grade)?\s*[:\-]?\s*" + _CUT + r"\b", re.I),
    re.compile(r"\b" + _CUT + r"\s+cut\b", re.I),
]

# A contiguous 8-12 digit run, else 3-4 digit groups split by one space or dash.
# A date or weight later on the same line must not join the run.
_DIGITS = r"(\d{8,12}|\d{3,4}(?:[ \-]\d{3,4}){1,3})(?!\d)"

NUMBER_PATTERNS = [
    re.compile(r"(?:report|certificate|cert\.?)\s*(?:number|no\.?|#)\s*[:\-]?\s*" + _DIGITS, re.I),
    re.compile(r"\b(?:number|no\.?|report)\s*[:#\-]?\s*" + _DIGITS, re.I),
    re.compile(r"(?<!\d)(\d{10})(?!\d)"),
]

LAB_GROWN_PATTERN = re.compile(
    r"lab(?:oratory)?[\s\-]?grown|synthetic|man[\s\-]?made", re.I
)


@dataclass(frozen=True)
class CertificateSpecs:
    carat: float = 0.0
    color: str = ""
    clarity: str = ""
    cut: str = ""
    certificate_number: str = ""
    laboratory: str = ""
    type: str = NATURAL

    def to_dict(self) -> dict:
        return {
            "carat": self.carat,
            "color": self.color,
            "clarity": self.clarity,
            "cut": self.cut,
            "certificateNumber": self.certificate_number,
            "laboratory": self.laboratory,
            "type": self.type,
        }


# ----- normalizers (also used on LLM supplied values) -----

def normalize_carat(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        num = float(value)
    else:
        m = re.search(r"\d+(?:[.,]\d+)?", str(value))
        if not m:
            return 0.0
        num = float(m.group(0).replace(",", "."))
    return num if 0 < num < MAX_PLAUSIBLE_CARAT else 0.0


def normalize_color(value: Any) -> str:
    v = str(value or "").strip().upper()
    return v if v in COLOR_GRADES else ""


def normalize_clarity(value: Any) -> str:
    v = re.sub(r"\s+", "", str(value or "")).upper()
    return v if v in CLARITY_GRADES else ""


def normalize_cut(value: Any) -> str:
    v = " ".join(str(value or "").split()).title()
    return v if v in CUT_GRADES else ""


def normalize_certificate_number(value: Any) -> str:
    return re.sub(r"[\s\-]", "", str(value or ""))


def normalize_laboratory(value: Any) -> str:
    v = str(value or "").upper()
    for lab in LAB_PRECEDENCE:
        if lab in v:
            return lab
    return ""


def normalize_type(value: Any) -> str:
    v = str(value or "").strip()
    if not v:
        return ""
    return LAB_GROWN if LAB_GROWN_PATTERN.search(v) else NATURAL


# ----- per-field extraction -----

def _report_number(value: Any) -> str:
    number = normalize_certificate_number(value)
    return number if 8 <= len(number) <= 12 else ""


def _first(patterns, text: str, normalize) -> Any:
    for pat in patterns:
        for m in pat.finditer(text):
            value = normalize(m.group(1))
            if value:
                return value
    return None


def extract_laboratory(text: str) -> str:
    upper = text.upper()
    for lab in LAB_PRECEDENCE:
        if lab in upper:
            return lab
    return ""


def extract_type(text: str) -> str:
    return LAB_GROWN if LAB_GROWN_PATTERN.search(text) else NATURAL


def extract_specs(text: Optional[str]) -> CertificateSpecs:
    text = text or ""
    number = _first(NUMBER_PATTERNS, text, _report_number) or ""
    return CertificateSpecs(
        carat=_first(CARAT_PATTERNS, text, normalize_carat) or 0.0,
        color=_first(COLOR_PATTERNS, text, normalize_color) or "",
        clarity=_first(CLARITY_PATTERNS, text, normalize_clarity) or "",
        cut=_first(CUT_PATTERNS, text, normalize_cut) or "",
        certificate_number=number,
        laboratory=extract_laboratory(text),
        type=extract_type(text),
    )


def specs_from_payload(data: Optional[Mapping[str, Any]]) -> CertificateSpecs:
    """Build specs from an LLM `specifications` object, normalizing every field."""
    data = data or {}
    return CertificateSpecs(
        carat=normalize_carat(data.get("carat")),
        color=normalize_color(data.get("color")),
        clarity=normalize_clarity(data.get("clarity")),
        cut=normalize_cut(data.get("cut")),
        certificate_number=normalize_certificate_number(data.get("certificateNumber")),
        laboratory=normalize_laboratory(data.get("laboratory")),
        type=normalize_type(data.get("type")),
    )


def merge_specs(primary: CertificateSpecs, fallback: CertificateSpecs) -> CertificateSpecs:
    """Fill every empty field of `primary` from `fallback`."""
    updates = {
        f.name: getattr(fallback, f.name)
        for f in fields(CertificateSpecs)
        if not getattr(primary, f.name)
    }
    return replace(primary, **updates)
