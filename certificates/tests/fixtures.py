GIA_NATURAL_TEXT = """GIA
Natural Diamond Grading Report
GIA Report Number 2141438171
Shape and Cutting Style Round Brilliant
Measurements 6.47 - 6.50 x 4.01 mm
GRADING RESULTS
Carat Weight 1.01 carat
Color Grade F
Clarity Grade VS1
Cut Grade Excellent
Polish Excellent
Symmetry Excellent
Fluorescence None
"""

IGI_LAB_GROWN_TEXT = """INTERNATIONAL GEMOLOGICAL INSTITUTE
IGI LABORATORY GROWN DIAMOND REPORT
Report No. LG 6123 4567 89
Description: Laboratory Grown Diamond
Shape and Cut: Oval Brilliant
Carat Weight: 2.05 Carats
Color Grade: E
Clarity Grade: VVS2
"""

ANALYSIS = {
    "overview": "A bright, near-colorless round diamond.",
    "detailedAnalysis": {
        "cut": "Excellent cut gives strong sparkle.",
        "color": "F is in the colorless range.",
        "clarity": "VS1 inclusions are not eye-visible.",
        "carat": "Just over one carat.",
    },
    "notableFeatures": ["No fluorescence"],
    "potentialConcerns": [],
    "questionsForJeweler": ["Can I see it under daylight?"],
}
