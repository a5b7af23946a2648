from .models import PromptRequest, TemplateVersion

REJECTION_SENTENCE = "Error: Input does not appear to be a medical or clinical note."

BEGIN_JSON, END_JSON = "[BEGIN_JSON]", "[END_JSON]"
BEGIN_SUMMARY, END_SUMMARY = "[BEGIN_SUMMARY]", "[END_SUMMARY]"

NOTE_SYSTEM = "You are a helpful medical coding assistant."

_CLASSIFY = """Before generating output, first determine if the provided input is clinical or medical in nature.

If the input does **NOT** contain medical terminology, patient symptoms, diagnoses, treatment plans, medications, or other clinical language, respond with exactly:

{rejection}

Otherwise, proceed to generate the output described below.
"""

_ROLE = """You are a medical documentation assistant trained in health informatics. Your job is to take raw, unstructured doctor
or nurse notes and convert them into clearly formatted, database-ready records. Structure the record in a standardized
JSON format that includes relevant fields like patient information, diagnosis, ICD-10-CA codes, medications, vitals, and
treatment plan. The record must be HL7-compliant in style and format. Expand shorthand, clarify abbreviations, and ensure
clinical accuracy while preserving the original intent of the note.
"""

NOTE_USER_DUAL = _CLASSIFY + "\n" + _ROLE + """
Also write a short plain-language summary of the note for a clinician reading it at a glance.

Output format (mandatory). Return exactly two sections using these literal markers:

{begin_json}
<the JSON record>
{end_json}
{begin_summary}
<the plain-language summary>
{end_summary}

Do not wrap either section in code blocks or backticks. Do not use markdown code fences anywhere.

Note: "{note}"

Respond in English, no extra commentary outside the two sections.
"""

NOTE_USER_JSON_ONLY = _CLASSIFY + "\n" + _ROLE + """
Note: "{note}"

Respond in English, no extra commentary.
Important: Do not wrap the output in code blocks or backticks. Return only raw JSON and no other non-whitespace characters.
"""

_TEMPLATES = {
    TemplateVersion.DUAL_OUTPUT: NOTE_USER_DUAL,
    TemplateVersion.JSON_ONLY: NOTE_USER_JSON_ONLY,
}


def build_prompt(note_text: str, template_version: TemplateVersion = TemplateVersion.DUAL_OUTPUT) -> PromptRequest:
    return PromptRequest(note_text=note_text, template_version=template_version)


def render_prompt(req: PromptRequest) -> tuple[str, str]:
    """Returns (system_prompt, user_prompt). The note is inserted verbatim."""
    user = _TEMPLATES[req.template_version].format(
        rejection=REJECTION_SENTENCE,
        begin_json=BEGIN_JSON, end_json=END_JSON,
        begin_summary=BEGIN_SUMMARY, end_summary=END_SUMMARY,
        note=req.note_text,
    )
    return NOTE_SYSTEM, user
