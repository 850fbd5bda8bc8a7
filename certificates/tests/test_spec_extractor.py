from django.test import SimpleTestCase

from certificates.utils.spec_extractor import (
    LAB_GROWN,
    NATURAL,
    CertificateSpecs,
    extract_specs,
    merge_specs,
    normalize_carat,
    normalize_certificate_number,
    normalize_clarity,
    normalize_color,
    normalize_cut,
    normalize_laboratory,
    normalize_type,
    specs_from_payload,
)

from .fixtures import GIA_NATURAL_TEXT, IGI_LAB_GROWN_TEXT


class ExtractSpecsTests(SimpleTestCase):
    def test_gia_natural_report(self):
        specs = extract_specs(GIA_NATURAL_TEXT)
        self.assertEqual(specs.carat, 1.01)
        self.assertEqual(specs.color, "F")
        self.assertEqual(specs.clarity, "VS1")
        self.assertEqual(specs.cut, "Excellent")
        self.assertEqual(specs.certificate_number, "2141438171")
        self.assertEqual(specs.laboratory, "GIA")
        self.assertEqual(specs.type, NATURAL)

    def test_igi_lab_grown_report(self):
        specs = extract_specs(IGI_LAB_GROWN_TEXT)
        self.assertEqual(specs.carat, 2.05)
        self.assertEqual(specs.color, "E")
        self.assertEqual(specs.clarity, "VVS2")
        self.assertEqual(specs.laboratory, "IGI")
        self.assertEqual(specs.type, LAB_GROWN)

    def test_gia_wins_when_both_labs_are_mentioned(self):
        text = "IGI report, graded to GIA standards. Carat Weight 0.70"
        self.assertEqual(extract_specs(text).laboratory, "GIA")

    def test_empty_text_gives_defaults(self):
        for text in ("", None, "   \n  "):
            with self.subTest(text=text):
                self.assertEqual(extract_specs(text), CertificateSpecs())

    def test_unrelated_text_does_not_raise(self):
        specs = extract_specs("Invoice #12 for a gold ring, total 450.00 USD")
        self.assertEqual(specs.color, "")
        self.assertEqual(specs.clarity, "")
        self.assertEqual(specs.laboratory, "")

    def test_certificate_number_with_separators(self):
        specs = extract_specs("Report Number: 2141 438 171")
        self.assertEqual(specs.certificate_number, "2141438171")

    def test_short_number_is_rejected(self):
        self.assertEqual(extract_specs("Report Number: 12345").certificate_number, "")

    def test_number_does_not_run_into_following_values(self):
        cases = [
            "GIA Report Number 2141438171 12/05/2023",
            "Report No: 2141438171 1.01 carat",
            "Report Number: 2141 438 171 12/05/2023",
            "Report No. 2141-438-171 0.90 ct",
        ]
        for text in cases:
            with self.subTest(text=text):
                self.assertEqual(extract_specs(text).certificate_number, "2141438171")

    def test_overlong_digit_run_is_rejected(self):
        self.assertEqual(extract_specs("Report Number: 21414381711234").certificate_number, "")

    def test_lowercase_word_is_not_a_color_grade(self):
        self.assertEqual(extract_specs("Color: colorless stone").color, "")

    def test_grade_before_label(self):
        specs = extract_specs("This is an H color, SI1 clarity, Very Good cut stone")
        self.assertEqual(specs.color, "H")
        self.assertEqual(specs.clarity, "SI1")
        self.assertEqual(specs.cut, "Very Good")

    def test_to_dict_uses_wire_names(self):
        d = extract_specs(GIA_NATURAL_TEXT).to_dict()
        self.assertEqual(
            set(d), {"carat", "color", "clarity", "cut", "certificateNumber", "laboratory", "type"}
        )
        self.assertEqual(d["certificateNumber"], "2141438171")


class NormalizerTests(SimpleTestCase):
    def test_carat(self):
        self.assertEqual(normalize_carat("1.01 ct"), 1.01)
        self.assertEqual(normalize_carat("1,5"), 1.5)
        self.assertEqual(normalize_carat(2), 2.0)
        self.assertEqual(normalize_carat(None), 0.0)
        self.assertEqual(normalize_carat(True), 0.0)
        self.assertEqual(normalize_carat("n/a"), 0.0)
        self.assertEqual(normalize_carat(250), 0.0)

    def test_grades(self):
        self.assertEqual(normalize_color(" f "), "F")
        self.assertEqual(normalize_color("Z"), "")
        self.assertEqual(normalize_clarity("vs 1"), "VS1")
        self.assertEqual(normalize_clarity("VS3"), "")
        self.assertEqual(normalize_cut("very   good"), "Very Good")
        self.assertEqual(normalize_cut("ideal"), "")

    def test_number_and_lab(self):
        self.assertEqual(normalize_certificate_number("2141-438 171"), "2141438171")
        self.assertEqual(normalize_laboratory("gia laboratory"), "GIA")
        self.assertEqual(normalize_laboratory("IGI / GIA"), "GIA")
        self.assertEqual(normalize_laboratory("HRD"), "")

    def test_type(self):
        self.assertEqual(normalize_type("Lab Grown"), LAB_GROWN)
        self.assertEqual(normalize_type("synthetic"), LAB_GROWN)
        self.assertEqual(normalize_type("Natural"), NATURAL)
        self.assertEqual(normalize_type(""), "")


class PayloadAndMergeTests(SimpleTestCase):
    def test_specs_from_payload_normalizes(self):
        specs = specs_from_payload({
            "carat": "1.01 carats",
            "color": "f",
            "clarity": "VS1",
            "cut": "excellent",
            "certificateNumber": "2141 438 171",
            "laboratory": "GIA Laboratory",
            "type": "Lab-Grown",
        })
        self.assertEqual(
            specs,
            CertificateSpecs(1.01, "F", "VS1", "Excellent", "2141438171", "GIA", LAB_GROWN),
        )

    def test_specs_from_empty_payload(self):
        specs = specs_from_payload(None)
        self.assertEqual(specs.carat, 0.0)
        self.assertEqual(specs.type, "")

    def test_merge_fills_only_blanks(self):
        primary = CertificateSpecs(carat=1.2, color="", clarity="SI1", type="")
        fallback = CertificateSpecs(carat=9.9, color="G", clarity="VS2", laboratory="IGI")
        merged = merge_specs(primary, fallback)
        self.assertEqual(merged.carat, 1.2)
        self.assertEqual(merged.color, "G")
        self.assertEqual(merged.clarity, "SI1")
        self.assertEqual(merged.laboratory, "IGI")
        self.assertEqual(merged.type, NATURAL)
