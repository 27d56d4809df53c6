"""
Tool Functions for the grad program assistant
Each tool builds a prompt, calls Perplexity and/or Gemini, validates the shape
of the structured answer and reports progress on the data stream.
"""
import inspect
from concurrent.futures import ThreadPoolExecutor
import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.orm import Session

import crud
import gemini_client
import images
import perplexity_client
import prompts
from classifier import CHOICE_TYPES, group_by_choice_type, normalize_choice_type
from config import settings
from exceptions import AIServiceError
from schemas import (
    ProgramComparison, ProgramComparisonItem, ProgramDetails, ResearchedProgram,
    SaveProgramPayload, ShortlistedUniversity, StudentProfileResponse, ToolResult, UniversityRanking
)
from stream import DataStream

logger = logging.getLogger(__name__)

PHOTO_LOOKUP_WORKERS = 8


# ============ Tool Decorator ============

def tool(name: str, description: str, parameters: Dict[str, Any]):
    """Decorator to mark methods as LLM tools with schema."""
    def decorator(func):
        func.__tool_schema__ = {
            "name": name,
            "description": description,
            "parameters": parameters
        }
        func.__tool_name__ = name
        return func
    return decorator


def _string_param(description: str) -> Dict[str, str]:
    return {"type": "STRING", "description": description}


# ============ Tool Definitions ============

class ProgramTools:
    """
    Collection of tools the chat model can call.
    Bound to one request: its database session, user and data stream.
    """

    def __init__(self, db: Session, user_id: str, data_stream: Optional[DataStream] = None):
        self.db = db
        self.user_id = user_id
        self.data_stream = data_stream

    @classmethod
    def _tool_methods(cls) -> Dict[str, Any]:
        return {
            attr.__tool_name__: attr
            for attr in vars(cls).values()
            if callable(attr) and hasattr(attr, "__tool_name__")
        }

    @classmethod
    def declarations(cls) -> List[Dict[str, Any]]:
        """Function declarations in the shape Gemini expects."""
        return [method.__tool_schema__ for method in cls._tool_methods().values()]

    def execute(self, name: str, args: Dict[str, Any]) -> ToolResult:
        """Run a tool by name with model-supplied arguments."""
        method = self._tool_methods().get(name)
        if method is None:
            logger.warning(f"[TOOL] Model requested unknown tool: {name}")
            return ToolResult(text=f"Error: Unknown tool {name}.")

        try:
            inspect.signature(method).bind(self, **args)
        except TypeError as e:
            logger.warning(f"[TOOL:{name}] Invalid arguments {args}: {str(e)}")
            return ToolResult(text=f"Error: Invalid arguments for {name}.")

        return method(self, **args)

    def _write(self, type: str, content: str = ""):
        if self.data_stream is not None:
            self.data_stream.write_data(type, content)

    def _student_json(self) -> str:
        profile = crud.get_student_profile_by_user_id(self.db, self.user_id)
        if profile is None:
            return "null"
        return StudentProfileResponse.model_validate(profile).model_dump_json(by_alias=True, exclude_none=True)

    @tool(
        name="universityResearch",
        description="Find the best universities in a given country according to QS World Ranking.",
        parameters={
            "type": "OBJECT",
            "properties": {
                "country": _string_param("The country to research universities in"),
                "course": _string_param("The course to research universities for"),
            },
            "required": ["country"]
        }
    )
    def university_research(self, country: str, course: Optional[str] = None) -> ToolResult:
        logger.info(f"[TOOL:universityResearch] country={country}, course={course}")
        self._write("status", "Researching universities...")

        research = perplexity_client.generate_text(prompts.university_research_prompt(country, course))
        universities = gemini_client.generate_object(
            prompts.university_extraction_prompt(research.text),
            UniversityRanking,
            many=True
        )

        logger.info(f"[TOOL:universityResearch] Found {len(universities)} universities")
        return ToolResult(
            object=[uni.model_dump(by_alias=True) for uni in universities],
            sources=research.sources
        )

    @tool(
        name="programResearch",
        description="Research a specific program or course in a given university and return structured details.",
        parameters={
            "type": "OBJECT",
            "properties": {
                "program": _string_param("The program or course to research"),
                "university": _string_param("The university to research the program in"),
            },
            "required": ["program", "university"]
        }
    )
    def program_research(self, program: str, university: str) -> ToolResult:
        logger.info(f"[TOOL:programResearch] program={program}, university={university}")
        self._write("status", "Researching program...")

        cached = crud.get_public_program(self.db, program, university)
        if cached:
            logger.info(f"[TOOL:programResearch] Cache hit: {cached.id}")
            return ToolResult(object=ProgramDetails.model_validate(cached).model_dump(by_alias=True))

        research = perplexity_client.generate_text(prompts.program_research_prompt(program, university))

        try:
            details = gemini_client.generate_object(
                prompts.program_extraction_prompt(research.text),
                ResearchedProgram
            )
        except AIServiceError as e:
            # Fallback: return the text so the UI can show something
            logger.error(f"[TOOL:programResearch] Gemini extraction failed: {str(e)}")
            return ToolResult(text=research.text, sources=research.sources)

        try:
            details.image_urls = images.fetch_university_image_urls(university)
        except httpx.HTTPError as e:
            logger.warning(f"[TOOL:programResearch] Openverse lookup failed: {str(e)}")
            details.image_urls = []

        # Cache rows are keyed on the names the tool was asked for
        crud.upsert_public_program(
            self.db,
            {**details.model_dump(), "program_name": program.strip(), "university_name": university.strip()}
        )
        return ToolResult(object=details.model_dump(by_alias=True), sources=research.sources)

    @tool(
        name="personalizedShortlistings",
        description="Generate a personalized shortlist of universities for a given student.",
        parameters={
            "type": "OBJECT",
            "properties": {
                "country": _string_param("Country to research universities for"),
            },
            "required": ["country"]
        }
    )
    def personalized_shortlistings(self, country: str) -> ToolResult:
        logger.info(f"[TOOL:personalizedShortlistings] country={country}, user={self.user_id}")
        profile = crud.get_student_profile_by_user_id(self.db, self.user_id)
        self._write("status", "Researching universities...")

        research = perplexity_client.generate_text(
            prompts.shortlist_prompt(self._student_json(), country, profile.target_major if profile else None),
            model=settings.PERPLEXITY_DEEP_MODEL
        )
        universities = gemini_client.generate_object(
            prompts.shortlist_extraction_prompt(research.text),
            ShortlistedUniversity,
            many=True
        )

        with ThreadPoolExecutor(max_workers=PHOTO_LOOKUP_WORKERS) as executor:
            photos = list(executor.map(images.fetch_university_photo, [uni.name for uni in universities]))

        results = []
        for uni, photo in zip(universities, photos):
            uni.choice_type = normalize_choice_type(uni.choice_type)
            uni.photo = photo or images.DEFAULT_UNIVERSITY_PHOTO
            results.append(uni.model_dump(by_alias=True))

        grouped = group_by_choice_type(results)
        logger.info(
            f"[TOOL:personalizedShortlistings] "
            + ", ".join(f"{choice}={len(grouped[choice])}" for choice in CHOICE_TYPES)
        )
        return ToolResult(
            object=[uni for choice in CHOICE_TYPES for uni in grouped[choice]],
            sources=research.sources
        )

    @tool(
        name="compareProgram",
        description="Compare two programs from the student's saved list and pick the better fit.",
        parameters={
            "type": "OBJECT",
            "properties": {
                "program1name": _string_param("The first program name"),
                "program1university": _string_param("The first program university"),
                "program2name": _string_param("The second program name"),
                "program2university": _string_param("The second program university"),
            },
            "required": ["program1name", "program1university", "program2name", "program2university"]
        }
    )
    def compare_program(
        self,
        program1name: str,
        program1university: str,
        program2name: str,
        program2university: str
    ) -> ToolResult:
        logger.info(
            f"[TOOL:compareProgram] {program1name} @ {program1university} vs {program2name} @ {program2university}"
        )
        self._write("status", "Comparing programs...")

        program1, program2 = crud.get_two_saved_programs(
            self.db,
            self.user_id,
            program1university,
            program1name,
            program2university,
            program2name
        )

        if not program1 or not program2:
            if not program1 and not program2:
                error_message = (
                    f"Error: Could not find {program1name} at {program1university} and "
                    f"{program2name} at {program2university} in your saved programs."
                )
            elif not program1:
                error_message = f"Error: Could not find {program1name} at {program1university} in your saved programs."
            else:
                error_message = f"Error: Could not find {program2name} at {program2university} in your saved programs."
            self._write("error", error_message)
            logger.error(f"[TOOL:compareProgram] {error_message}")
            return ToolResult(text=error_message)

        payload1 = SaveProgramPayload.model_validate(program1)
        payload2 = SaveProgramPayload.model_validate(program2)

        items = gemini_client.generate_object(
            prompts.compare_prompt(
                payload1.model_dump_json(by_alias=True),
                payload2.model_dump_json(by_alias=True),
                self._student_json()
            ),
            ProgramComparisonItem,
            many=True,
            model_name=settings.GEMINI_COMPARE_MODEL
        )

        comparisons = [
            ProgramComparison(
                comparison=item.comparison,
                choice=item.choice,
                program1=payload1,
                program2=payload2
            ).model_dump(by_alias=True)
            for item in items
        ]
        return ToolResult(object=comparisons)

    @tool(
        name="deepResearch",
        description="Perform a deep research on a given query, use when getting info on colleges, scholarships, etc.",
        parameters={
            "type": "OBJECT",
            "properties": {
                "query": _string_param("What to research"),
            },
            "required": ["query"]
        }
    )
    def deep_research(self, query: str) -> ToolResult:
        logger.info(f"[TOOL:deepResearch] query={query}")
        self._write("status", "Researching...")

        try:
            research = perplexity_client.generate_text(query)
        except AIServiceError as e:
            logger.error(f"[TOOL:deepResearch] {str(e)}")
            raise

        self._write("finish")
        return ToolResult(text=research.text, sources=research.sources)


def tool_result_payload(result: ToolResult) -> Dict[str, Any]:
    """JSON-safe form of a tool result, as fed back to the model."""
    return json.loads(result.model_dump_json(by_alias=True, exclude_none=True))
