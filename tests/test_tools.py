"""
Tests for the assistant tools. Perplexity, Gemini and image lookups are mocked.
"""

import threading
from unittest.mock import patch

import httpx
import pytest

from exceptions import AIServiceError, StructuredOutputError
from images import DEFAULT_UNIVERSITY_PHOTO
from models import PublicProgram, SavedProgram
from perplexity_client import ResearchText
from schemas import ProgramComparisonItem, ResearchedProgram, ShortlistedUniversity, UniversityRanking
from tools import ProgramTools


def _research(text="research notes"):
    return ResearchText(text=text, sources=["https://example.edu/source"])


def _researched_program(**overrides):
    values = dict(
        program_name="MS in Computer Science",
        university_name="Carnegie Mellon University",
        overview="A research-heavy master's program.",
        deadline_hint="December 15",
        duration="16 months",
        cost_hint="$58,000 per year",
        highlight1="Capstone",
        highlight2="AI track",
    )
    values.update(overrides)
    return ResearchedProgram(**values)


def _shortlisted(name, choice_type, match_score):
    return ShortlistedUniversity(
        name=name,
        program="MS in Computer Science",
        highlights="Strong research",
        match_score=match_score,
        choice_type=choice_type,
        tuition_cost=45000,
        duration="2 years",
        website_link="https://example.edu",
        photo="logo.png",
    )


@pytest.fixture
def tools(db, student, data_stream):
    return ProgramTools(db, student.id, data_stream)


class TestRegistry:
    def test_declares_all_tools(self):
        names = {declaration["name"] for declaration in ProgramTools.declarations()}

        assert names == {
            "universityResearch",
            "programResearch",
            "personalizedShortlistings",
            "compareProgram",
            "deepResearch",
        }

    def test_unknown_tool_returns_error_text(self, tools):
        result = tools.execute("bookFlight", {})

        assert result.object is None
        assert "Unknown tool" in result.text

    def test_invalid_arguments_return_error_text(self, tools):
        result = tools.execute("deepResearch", {"question": "visas"})

        assert "Invalid arguments" in result.text


class TestUniversityResearch:
    def test_returns_validated_rankings(self, tools, data_stream):
        rankings = [UniversityRanking(name="ETH Zurich", rank=7, description="Top technical university")]

        with patch("perplexity_client.generate_text", return_value=_research()) as research, \
                patch("gemini_client.generate_object", return_value=rankings):
            result = tools.execute("universityResearch", {"country": "Switzerland", "course": "Robotics"})

        assert result.object == [{"name": "ETH Zurich", "rank": 7, "description": "Top technical university"}]
        assert result.sources == ["https://example.edu/source"]
        assert "Switzerland in Robotics" in research.call_args.args[0]
        assert [event.content for event in data_stream.events] == ["Researching universities..."]


class TestProgramResearch:
    def test_researches_and_caches_program(self, tools, db):
        with patch("perplexity_client.generate_text", return_value=_research()), \
                patch("gemini_client.generate_object", return_value=_researched_program()), \
                patch("images.fetch_university_image_urls", return_value=["https://img/1.jpg"]):
            result = tools.program_research("MS in Computer Science", "Carnegie Mellon University")

        assert result.object["programName"] == "MS in Computer Science"
        assert result.object["imageUrls"] == ["https://img/1.jpg"]
        cached = db.query(PublicProgram).one()
        assert cached.cost_hint == "$58,000 per year"
        assert cached.image_urls == ["https://img/1.jpg"]

    def test_cached_program_skips_research(self, tools, db):
        db.add(PublicProgram(
            program_name="MS in Computer Science",
            university_name="Carnegie Mellon University",
            overview="Cached overview",
            image_urls=[],
        ))
        db.commit()

        with patch("perplexity_client.generate_text") as research:
            result = tools.program_research("ms in computer science", "Carnegie Mellon University ")

        research.assert_not_called()
        assert result.object["overview"] == "Cached overview"

    def test_repeat_request_hits_cache_when_names_are_expanded(self, tools, db):
        with patch("perplexity_client.generate_text", return_value=_research()) as research, \
                patch("gemini_client.generate_object", return_value=_researched_program(
                    program_name="Master of Science in Computer Science",
                )), \
                patch("images.fetch_university_image_urls", return_value=[]):
            first = tools.program_research("MS CS", "CMU")
            second = tools.program_research("MS CS", "CMU")

        assert research.call_count == 1
        assert first.object["programName"] == "Master of Science in Computer Science"
        assert second.object["overview"] == "A research-heavy master's program."
        assert db.query(PublicProgram).count() == 1

    def test_extraction_failure_falls_back_to_text(self, tools, db):
        with patch("perplexity_client.generate_text", return_value=_research("raw program notes")), \
                patch("gemini_client.generate_object", side_effect=StructuredOutputError("gemini", "bad json")):
            result = tools.program_research("MS in CS", "CMU")

        assert result.object is None
        assert result.text == "raw program notes"
        assert db.query(PublicProgram).count() == 0

    def test_image_lookup_failure_keeps_details(self, tools):
        with patch("perplexity_client.generate_text", return_value=_research()), \
                patch("gemini_client.generate_object", return_value=_researched_program()), \
                patch("images.fetch_university_image_urls", side_effect=httpx.ConnectError("offline")):
            result = tools.program_research("MS in Computer Science", "Carnegie Mellon University")

        assert result.object["imageUrls"] == []


class TestPersonalizedShortlistings:
    def test_groups_and_fills_photos(self, tools, student_profile):
        universities = [
            _shortlisted("Stanford University", "Reach", 40),
            _shortlisted("Arizona State University", "safe", 90),
            _shortlisted("Purdue University", "Target", 70),
            _shortlisted("Texas A&M University", "safe", 95),
        ]
        photos = {"Stanford University": "https://wiki/stanford.jpg"}

        with patch("perplexity_client.generate_text", return_value=_research()) as research, \
                patch("gemini_client.generate_object", return_value=universities), \
                patch("images.fetch_university_photo", side_effect=lambda name: photos.get(name)):
            result = tools.personalized_shortlistings("United States")

        assert [uni["name"] for uni in result.object] == [
            "Texas A&M University",
            "Arizona State University",
            "Purdue University",
            "Stanford University",
        ]
        assert [uni["choiceType"] for uni in result.object] == ["safe", "safe", "target", "ambitious"]
        assert result.object[3]["photo"] == "https://wiki/stanford.jpg"
        assert result.object[0]["photo"] == DEFAULT_UNIVERSITY_PHOTO

        prompt = research.call_args.args[0]
        assert "Computer Science" in prompt
        assert "United States" in prompt
        assert '"greQuantScore":165' in prompt

    def test_photo_lookups_run_concurrently(self, tools, student_profile):
        universities = [_shortlisted(f"University {i}", "target", 70 + i) for i in range(4)]
        barrier = threading.Barrier(len(universities), timeout=5)

        def lookup(name):
            barrier.wait()
            return f"https://wiki/{name}.jpg"

        with patch("perplexity_client.generate_text", return_value=_research()), \
                patch("gemini_client.generate_object", return_value=universities), \
                patch("images.fetch_university_photo", side_effect=lookup):
            result = tools.personalized_shortlistings("Canada")

        assert {uni["photo"] for uni in result.object} == {
            f"https://wiki/University {i}.jpg" for i in range(4)
        }


class TestCompareProgram:
    def _save(self, db, student, program_name, university_name):
        program = SavedProgram(
            user_id=student.id,
            program_name=program_name,
            university_name=university_name,
            overview=f"{program_name} overview",
            image_urls=[],
            match_score=75,
            choice_type="target",
        )
        db.add(program)
        db.commit()
        return program

    def test_missing_program_reports_error(self, tools, db, student, data_stream):
        self._save(db, student, "MS in CS", "CMU")

        with patch("gemini_client.generate_object") as generate:
            result = tools.compare_program("MS in CS", "CMU", "MS in ML", "Stanford")

        generate.assert_not_called()
        assert result.text == "Error: Could not find MS in ML at Stanford in your saved programs."
        assert data_stream.events[-1].type == "error"

    def test_both_missing_names_both(self, tools):
        result = tools.compare_program("MS in CS", "CMU", "MS in ML", "Stanford")

        assert "MS in CS at CMU and MS in ML at Stanford" in result.text

    def test_comparison_is_enriched_with_programs(self, tools, db, student, student_profile):
        self._save(db, student, "MS in CS", "CMU")
        self._save(db, student, "MS in ML", "Stanford")
        items = [ProgramComparisonItem(comparison="CMU is more applied", choice="MS in CS at CMU")]

        with patch("gemini_client.generate_object", return_value=items) as generate:
            result = tools.compare_program("ms in cs", "cmu", "MS in ML", "Stanford")

        assert result.object[0]["comparison"] == "CMU is more applied"
        assert result.object[0]["program1"]["universityName"] == "CMU"
        assert result.object[0]["program2"]["programName"] == "MS in ML"
        assert result.object[0]["program2"]["matchScore"] == 75
        assert "University of Mumbai" in generate.call_args.args[0]


class TestDeepResearch:
    def test_returns_text_and_sources(self, tools, data_stream):
        with patch("perplexity_client.generate_text", return_value=_research("Scholarship list")):
            result = tools.deep_research("Fully funded CS scholarships in Germany")

        assert result.text == "Scholarship list"
        assert result.sources == ["https://example.edu/source"]
        assert [event.type for event in data_stream.events] == ["status", "finish"]

    def test_provider_errors_propagate(self, tools):
        with patch("perplexity_client.generate_text", side_effect=AIServiceError("perplexity", "429")):
            with pytest.raises(AIServiceError):
                tools.deep_research("anything")
