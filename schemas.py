"""
Pydantic schemas for API requests and responses.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, the frontend's wire format."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# User / Session Schemas
class UserResponse(CamelModel):
    id: str
    email: str
    is_guest: bool = False


# Student Profile Schemas
class StudentProfileUpdate(CamelModel):
    target_major: str = Field(min_length=1)
    target_term: Optional[str] = None
    college: str = Field(min_length=1)
    undergrad_major: Optional[str] = None
    cgpa: Optional[float] = Field(default=None, ge=0)
    gre_quant_score: Optional[int] = Field(default=None, ge=130, le=170)
    gre_verbal_score: Optional[int] = Field(default=None, ge=130, le=170)
    gre_awa_score: Optional[float] = Field(default=None, ge=0, le=6)
    toefl_score: Optional[int] = Field(default=None, ge=0, le=120)
    ielts: Optional[float] = Field(default=None, ge=0, le=9)
    work_exp_months: Optional[int] = Field(default=None, ge=0)
    publications: Optional[int] = Field(default=None, ge=0)


class StudentProfileResponse(StudentProfileUpdate):
    id: int
    user_id: str


class ProfileEnvelope(CamelModel):
    profile: Optional[StudentProfileResponse] = None


class OnboardingStatus(CamelModel):
    profile_complete: bool
    redirect: Optional[str] = None


# Program Schemas
class ProgramDetails(CamelModel):
    program_name: str
    university_name: str
    overview: Optional[str] = None
    gpa_requirement: Optional[str] = None
    gre_requirement: Optional[str] = None
    toefl_requirement: Optional[str] = None
    ielts_requirement: Optional[str] = None
    requirements_summary: Optional[str] = None
    deadline_hint: Optional[str] = None
    duration: Optional[str] = None
    cost_hint: Optional[str] = None
    highlight1: Optional[str] = None
    highlight2: Optional[str] = None
    highlight3: Optional[str] = None
    official_link: Optional[str] = None
    image_urls: List[str] = []


class SaveProgramPayload(ProgramDetails):
    match_score: Optional[int] = Field(default=None, ge=0, le=100)
    choice_type: Optional[str] = None


class SaveProgramRequest(CamelModel):
    program: Optional[SaveProgramPayload] = None


class SavedProgramResponse(SaveProgramPayload):
    id: str


class SavedProgramDetail(SavedProgramResponse):
    hero_image_url: str


class ProgramListResponse(CamelModel):
    programs: List[SavedProgramResponse] = []
    count: int = 0


class SuccessResponse(CamelModel):
    success: bool = True
    id: Optional[str] = None


class DiscussRequest(CamelModel):
    ids: List[str] = []


# AI Tool Output Schemas
class UniversityRanking(CamelModel):
    name: str
    rank: int
    description: str


class ResearchedProgram(ProgramDetails):
    overview: str
    deadline_hint: str
    duration: str
    cost_hint: str
    highlight1: str
    highlight2: str


class ShortlistedUniversity(CamelModel):
    name: str
    program: str
    highlights: str
    match_score: int = Field(ge=0, le=100)
    choice_type: str
    tuition_cost: float
    duration: str
    website_link: str
    photo: Optional[str] = None


class ProgramComparisonItem(CamelModel):
    comparison: str
    choice: str


class ProgramComparison(ProgramComparisonItem):
    program1: SaveProgramPayload
    program2: SaveProgramPayload


class ToolResult(CamelModel):
    """What a tool hands back to the model: structured data or fallback text."""

    object: Optional[Any] = None
    text: Optional[str] = None
    sources: List[str] = []


# Chat Schemas
class DataStreamEvent(CamelModel):
    type: str  # status | error | finish
    content: str = ""


class ChatMessage(CamelModel):
    role: str  # user | model
    content: str


class ChatRequest(CamelModel):
    message: str = Field(min_length=1)
    history: List[ChatMessage] = []


class ToolInvocation(CamelModel):
    tool_name: str
    args: Dict[str, Any] = {}
    result: ToolResult


class ChatResponse(CamelModel):
    message: str
    events: List[DataStreamEvent] = []
    tool_invocations: List[ToolInvocation] = []

