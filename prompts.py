# Grad Program Assistant Prompts
# ==============================

SYSTEM_PROMPT = """
You are a graduate admissions assistant helping a student discover and compare
master's and PhD programs.

## Tools
- universityResearch: top universities in a country (optionally for a course)
- programResearch: structured details of one program at one university
- personalizedShortlistings: safe / target / ambitious shortlist for the student
- compareProgram: compare two programs from the student's saved list
- deepResearch: open-ended research (scholarships, visas, funding, rankings)

## Rules
1. Prefer calling a tool over answering from memory when facts may be dated
2. Use the student profile below to personalise advice
3. compareProgram only works for programs the student has saved; if it reports
   a missing program, tell the student to save it first
4. Keep answers short; the UI renders tool results as cards
"""

def get_system_prompt():
    """Returns the assistant system prompt."""
    return SYSTEM_PROMPT


def university_research_prompt(country, course=None):
    return (
        f"List the top 5 universities in {country}{' in ' + course if course else ''} "
        "according to the latest QS World University Rankings. For each, provide:\n"
        "- Name\n"
        "- Global rank (according to QS World University Rankings)\n"
        "- A short description (1 sentence)\n"
        "- An approximate reputation score as a percentage (if available)\n"
        "Format as a readable list."
    )


def university_extraction_prompt(text):
    return "Generate the json object for universities from the given info " + text


def program_research_prompt(program, university):
    return f"""Research the program "{program}" at "{university}". Provide:
- Program Name
- University Name
- A brief overview (1-2 sentences)
- GPA requirement (if available)
- GRE requirement (if available)
- TOEFL requirement (if available)
- IELTS requirement (if available)
- Any other requirements summary (concise)
- Application deadline (approximate, if available)
- Duration (e.g. 16 months)
- Estimated tuition/cost (annual, if available)
- 2-3 highlights (unique features, capstone, industry, etc.)
- Official program link (if available)
Format as a readable list."""


def program_extraction_prompt(text):
    return (
        "Extract the following fields as a JSON object from this info about the program at the university.\n"
        "Fields: programName, universityName, overview, gpaRequirement, greRequirement, "
        "toeflRequirement, ieltsRequirement, requirementsSummary, deadlineHint, duration, "
        "costHint, highlight1, highlight2, highlight3, officialLink\n"
        f"Text:\n{text}"
    )


def shortlist_prompt(student_json, country, target_major):
    major = target_major or "the student's target major"
    return f"""
Student Profile: {student_json}
Researching universities only for the country: {country}

Give me a list of universities offering a graduate program in {major} in {country} for the above profile. Divide the results in the following groups:

Safe: Very high to high chance of admission: select 3 universities in this category.
Target: Good match for the profile: select 2 universities in this category.
Ambitious: Small to low chance of admission: select 3 universities in this category.

Give me the following information for each university:
- Name of the university
- Name of the program
- Highlights of the program
- Match score of the program for the student between 0 and 100
- Type of choice, one of "safe", "target", "ambitious"
- Tuition cost (annual, USD)
- Website link for the program
- Duration of the program
"""


def shortlist_extraction_prompt(text):
    return "Generate the json object for universities from the given info " + text


def compare_prompt(program1_json, program2_json, student_json):
    return f"""Compare the two programs and return the comparison and the best choice between the two programs for the user

program1: {program1_json}
program2: {program2_json}

student profile: {student_json}
"""
