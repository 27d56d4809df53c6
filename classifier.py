from typing import List, Dict

CHOICE_TYPES = ["safe", "target", "ambitious"]

# Labels models use for the same admission-likelihood groups
CHOICE_TYPE_ALIASES = {
    "safety": "safe",
    "likely": "safe",
    "match": "target",
    "dream": "ambitious",
    "reach": "ambitious",
    "ambitous": "ambitious",
}

def normalize_choice_type(choice_type: str) -> str:
    """
    Map a free-form choice label onto safe, target or ambitious.

    Unknown labels default to "target".
    """
    label = (choice_type or "").strip().lower()
    if label in CHOICE_TYPES:
        return label
    return CHOICE_TYPE_ALIASES.get(label, "target")

def group_by_choice_type(universities: List[Dict]) -> Dict[str, List[Dict]]:
    """
    Group shortlisted universities by admission likelihood.

    Args:
        universities: Dicts with a "choiceType" key

    Returns:
        Dict with keys: safe, target, ambitious
        Each list sorted by match score, best first
    """
    grouped = {choice: [] for choice in CHOICE_TYPES}

    for uni in universities:
        grouped[normalize_choice_type(uni.get("choiceType"))].append(uni)

    for choice in CHOICE_TYPES:
        grouped[choice].sort(key=lambda uni: uni.get("matchScore") or 0, reverse=True)

    return grouped
