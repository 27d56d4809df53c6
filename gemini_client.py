import google.generativeai as genai
from pydantic import BaseModel, TypeAdapter, ValidationError
from typing import Any, List, Optional, Type
from config import settings
from exceptions import AIServiceError, StructuredOutputError
import json
import logging

logger = logging.getLogger(__name__)

JSON_GENERATION_CONFIG = {"response_mime_type": "application/json"}

def get_gemini_client(model_name: Optional[str] = None, **kwargs) -> genai.GenerativeModel:
    """Initialize and return Gemini client."""
    if not settings.GEMINI_API_KEY:
        raise AIServiceError("gemini", "GEMINI_API_KEY environment variable not set")

    genai.configure(api_key=settings.GEMINI_API_KEY)
    return genai.GenerativeModel(model_name or settings.GEMINI_MODEL, **kwargs)

def generate_text(prompt: str, model_name: Optional[str] = None) -> str:
    """Plain text completion."""
    model = get_gemini_client(model_name)
    try:
        response = model.generate_content(prompt)
        return response.text.strip()
    except Exception as e:
        logger.error(f"[ERROR] Gemini text generation failed: {str(e)}")
        raise AIServiceError("gemini", str(e)) from e

def _schema_instructions(schema: Type[BaseModel], many: bool) -> str:
    json_schema = json.dumps(schema.model_json_schema(by_alias=True))
    shape = "a JSON array whose items match" if many else "a single JSON object matching"
    return f"\n\nRespond with {shape} this JSON schema, and nothing else:\n{json_schema}"

def _strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()

def parse_structured_output(raw: str, schema: Type[BaseModel], many: bool = False) -> Any:
    """
    Validate model output against a pydantic schema.

    Args:
        raw: Text returned by the model
        schema: Pydantic model each object must match
        many: Expect an array of objects instead of a single object

    Returns:
        A model instance, or a list of them when many=True

    Raises:
        StructuredOutputError: output is not JSON or does not match the schema
    """
    try:
        data = json.loads(_strip_code_fence(raw))
    except json.JSONDecodeError as e:
        raise StructuredOutputError("gemini", f"response is not valid JSON: {e}") from e

    if many:
        if isinstance(data, dict):
            # Models sometimes wrap the array in a single-key object
            lists = [value for value in data.values() if isinstance(value, list)]
            data = lists[0] if len(lists) == 1 else [data]
        adapter = TypeAdapter(List[schema])
    else:
        if isinstance(data, list) and len(data) == 1:
            data = data[0]
        adapter = TypeAdapter(schema)

    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        raise StructuredOutputError("gemini", f"response does not match {schema.__name__}: {e}") from e

def generate_object(
    prompt: str,
    schema: Type[BaseModel],
    many: bool = False,
    model_name: Optional[str] = None
) -> Any:
    """Ask Gemini for JSON output and validate its shape."""
    model = get_gemini_client(model_name)
    try:
        response = model.generate_content(
            prompt + _schema_instructions(schema, many),
            generation_config=JSON_GENERATION_CONFIG
        )
        raw = response.text
    except Exception as e:
        logger.error(f"[ERROR] Gemini structured generation failed: {str(e)}")
        raise AIServiceError("gemini", str(e)) from e

    return parse_structured_output(raw, schema, many=many)
