from django.test import SimpleTestCase

from certificates.services.lookup import ReportLookup, SampleReportLookup


class SampleReportLookupTests(SimpleTestCase):
    def test_well_formed_number_finds_sample(self):
        report = SampleReportLookup().find("2141 438 171")
        self.assertEqual(report["clarity"], "VS1")

    def test_malformed_numbers_are_not_found(self):
        for number in ("", "abc", "12345", "21414381711234", "LG612345678"):
            with self.subTest(number=number):
                self.assertIsNone(SampleReportLookup().find(number))

    def test_returned_report_is_a_copy(self):
        lookup = SampleReportLookup()
        lookup.find("2141438171")["color"] = "Z"
        self.assertEqual(lookup.find("2141438171")["color"], "F")

    def test_base_class_is_abstract(self):
        with self.assertRaises(TypeError):
            ReportLookup()
