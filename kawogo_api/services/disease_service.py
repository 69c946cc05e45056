"""
Cassava disease reference data and the static fallback advice table.
"""
from typing import List

from kawogo_api.models.analysis import DiseaseInfo


HEALTHY_LABEL = "Healthy"
HEALTHY_ADVICE = "No treatment needed! Your plant looks healthy."

# Abbreviations returned by the classifier
DISEASE_NAMES = {
    "CBSD": "Cassava Brown Streak Disease",
    "CMD": "Cassava Mosaic Disease",
    "CGM": "Cassava Green Mite",
    "CBB": "Cassava Bacterial Blight",
}

FALLBACK_ADVICE = {
    "CBB": "Cassava Bacterial Blight: Remove infected leaves, improve drainage, "
           "and spray with copper-based solutions.",
    "CMD": "Cassava Mosaic Disease: Uproot infected plants and use clean cuttings "
           "from resistant varieties.",
    "CBSD": "Cassava Brown Streak Disease: Destroy infected plants and rotate crops "
            "for 2 years.",
}

GENERIC_ADVICE_TEMPLATE = (
    "{code} detected. Consult your local agriculture officer for diagnosis and treatment."
)


def lookup(disease_code) -> str:
    """
    Get pre-authored advice for a disease code.

    Never raises: unknown codes get a generic message naming the code.

    Args:
        disease_code: Disease abbreviation from the classifier

    Returns:
        Advice text
    """
    code = "" if disease_code is None else str(disease_code)
    advice = FALLBACK_ADVICE.get(code)
    if advice:
        return advice
    return GENERIC_ADVICE_TEMPLATE.format(code=code or "Unknown condition")


def list_known_diseases() -> List[DiseaseInfo]:
    """List every disease the classifier is known to emit, with its fallback advice."""
    return [
        DiseaseInfo(code=code, name=name, advice=lookup(code))
        for code, name in DISEASE_NAMES.items()
    ]
