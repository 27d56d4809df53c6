# Assistant Context Builder
# =========================
# Builds the system instruction sent to the chat model and the prompts the
# saved-program list hands to the assistant

from typing import List

from models import SavedProgram
from prompts import get_system_prompt

def build_system_instruction(student_json: str) -> str:
    """
    Build the complete system instruction: assistant rules plus student profile.

    Args:
        student_json: The student's profile as JSON, or "null" for guests

    Returns:
        System instruction text
    """
    return f"{get_system_prompt()}\n## Student Profile\n{student_json}\n"


def build_discussion_prompt(programs: List[SavedProgram]) -> str:
    """
    Turn a selection of saved programs into a chat message.

    One program asks about it, two programs ask for a comparison.
    """
    if len(programs) == 1:
        program = programs[0]
        return f"Tell me about {program.program_name} at {program.university_name}"
    if len(programs) == 2:
        program1, program2 = programs
        return (
            f"Compare {program1.program_name} at {program1.university_name} "
            f"with {program2.program_name} at {program2.university_name}"
        )
    raise ValueError("Select one or two programs to discuss")
