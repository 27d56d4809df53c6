import logging
from typing import Any, Dict, List, Tuple

import google.generativeai as genai
from sqlalchemy.orm import Session

import crud
from ai_context import build_system_instruction
from exceptions import AIServiceError
from gemini_client import get_gemini_client
from models import User
from schemas import ChatRequest, ChatResponse, StudentProfileResponse, ToolInvocation
from stream import DataStream
from tools import ProgramTools, tool_result_payload

logger = logging.getLogger(__name__)

MAX_TOOL_STEPS = 5

ONBOARDING_GUIDANCE = (
    "I'd be happy to help! However, I notice your profile isn't complete yet. "
    "Please finish your onboarding so I can provide personalized program recommendations."
)

ROLE_MAPPING = {
    "user": "user",
    "assistant": "model",
    "model": "model",
}

def _history(chat_request: ChatRequest) -> List[Dict[str, Any]]:
    return [
        {"role": ROLE_MAPPING.get(message.role, "user"), "parts": [message.content]}
        for message in chat_request.history
    ]

def _function_calls(response) -> List[Tuple[str, Dict[str, Any]]]:
    """Function calls requested in the first candidate of a model response."""
    if not response.candidates:
        return []

    calls = []
    for part in response.candidates[0].content.parts:
        function_call = getattr(part, "function_call", None)
        if function_call and function_call.name:
            calls.append((function_call.name, dict(function_call.args or {})))
    return calls

def _response_text(response) -> str:
    try:
        return response.text.strip()
    except ValueError:
        # No text part, e.g. the step limit ended on a function call
        return ""

def _send(chat, content):
    try:
        return chat.send_message(content)
    except Exception as e:
        logger.error(f"[ERROR] Gemini chat failed: {str(e)}")
        raise AIServiceError("gemini", str(e)) from e

def process_chat(db: Session, user: User, chat_request: ChatRequest) -> ChatResponse:
    """
    Run one chat turn: send the message, execute requested tools, feed results back.

    Args:
        db: Database session for the tools
        user: Authenticated user
        chat_request: New message plus prior history

    Returns:
        ChatResponse with the model's reply, tool status events and invocations
    """
    if not user.is_guest and not crud.is_student_profile_complete(db, user.id):
        logger.info(f"[LOGIC] Profile incomplete for {user.id}, providing guidance")
        return ChatResponse(message=ONBOARDING_GUIDANCE)

    data_stream = DataStream()
    tools = ProgramTools(db, user.id, data_stream)

    profile = crud.get_student_profile_by_user_id(db, user.id)
    student_json = (
        StudentProfileResponse.model_validate(profile).model_dump_json(by_alias=True, exclude_none=True)
        if profile else "null"
    )
    model = get_gemini_client(
        tools=[{"function_declarations": ProgramTools.declarations()}],
        system_instruction=build_system_instruction(student_json)
    )
    chat = model.start_chat(history=_history(chat_request))

    response = _send(chat, chat_request.message)
    invocations: List[ToolInvocation] = []

    for step in range(MAX_TOOL_STEPS):
        calls = _function_calls(response)
        if not calls:
            break

        parts = []
        for name, args in calls:
            logger.info(f"[LOGIC] Step {step + 1}: model called {name}")
            result = tools.execute(name, args)
            invocations.append(ToolInvocation(tool_name=name, args=args, result=result))
            parts.append(
                genai.protos.Part(
                    function_response=genai.protos.FunctionResponse(
                        name=name,
                        response=tool_result_payload(result)
                    )
                )
            )
        response = _send(chat, parts)

    return ChatResponse(
        message=_response_text(response),
        events=data_stream.events,
        tool_invocations=invocations
    )
