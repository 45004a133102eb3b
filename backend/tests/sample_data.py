"""Identifiers and payloads shared across test modules."""

CLIENT_ID = "550e8400-e29b-41d4-a716-446655440001"
OTHER_CLIENT_ID = "550e8400-e29b-41d4-a716-446655440002"
UNKNOWN_DIAGNOSIS_ID = "cjld2cjxh0000qzrmn831i7rn"

MDD_PAYLOAD = {
    "diagnosisName": "Major Depressive Disorder",
    "justification": (
        "Persistent depressed mood and anhedonia for six weeks. "
        "PHQ-9 score of 18."
    ),
}
GAD_PAYLOAD = {
    "diagnosisName": "Generalized Anxiety Disorder",
    "justification": "Excessive worry for over 6 months. GAD-7 score of 15.",
}
