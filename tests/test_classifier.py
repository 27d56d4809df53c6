"""
Tests for shortlist grouping by admission likelihood.
"""

from classifier import group_by_choice_type, normalize_choice_type


def test_normalize_choice_type():
    assert normalize_choice_type("Safe") == "safe"
    assert normalize_choice_type(" reach ") == "ambitious"
    assert normalize_choice_type("Dream") == "ambitious"
    assert normalize_choice_type("match") == "target"
    assert normalize_choice_type("") == "target"
    assert normalize_choice_type(None) == "target"


def test_group_by_choice_type_sorts_by_match_score():
    universities = [
        {"name": "A", "choiceType": "safe", "matchScore": 80},
        {"name": "B", "choiceType": "ambitious", "matchScore": 35},
        {"name": "C", "choiceType": "safe", "matchScore": 92},
        {"name": "D", "choiceType": "unknown", "matchScore": 60},
    ]

    grouped = group_by_choice_type(universities)

    assert [uni["name"] for uni in grouped["safe"]] == ["C", "A"]
    assert [uni["name"] for uni in grouped["target"]] == ["D"]
    assert [uni["name"] for uni in grouped["ambitious"]] == ["B"]
