"""Prompt templates and generation parameters for the AI task pipeline.

One TaskProfile per TaskType holds the instruction template and the
generation parameters used for that task. PromptBuilder looks the profile up
and concatenates the template with the caller's content, untouched.

All templates ask for British English spelling and terminology.

Exports:
    EXTRACT_PROMPT: Field extraction template (JSON-only output).
    SUMMARIZE_PROMPT: Structured meeting summary template.
    QUERY_PROMPT: Question answering template grounded in the content.
    TaskProfile: Template + temperature + output cap for one task.
    PromptBuilder: Builds a GenerationRequest for a task and content.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.meeting_ai.ai.schemas import GenerationRequest, TaskType
from src.meeting_ai.config import Settings

CONTENT_SEPARATOR = "\n\nContent to analyse:\n"


# -- Templates ----------------------------------------------------------------


EXTRACT_PROMPT: str = """\
You are a meeting data extraction expert. Analyse the provided content and \
extract meeting details using British English conventions.

Look for:
- Meeting title in filename or document header
- Date in YYYY-MM-DD format from filename or content
- Time in HH:MM format from timestamps or content
- Location mentions (conference rooms, cities, virtual platforms)
- Client name or organisation mentioned
- Project name or identifier
- Attendee names mentioned in conversation

Return ONLY a JSON object with this exact structure:
{
  "title": "extracted meeting title or null",
  "date": "YYYY-MM-DD format or null",
  "time": "HH:MM format or null",
  "location": "meeting location or null",
  "client": "client name or organisation or null",
  "project": "project name or identifier or null",
  "attendees": "comma-separated attendees or null"
}

For the title, prefer meaningful topics from filename over generic phrases.
For transcripts, extract the main business purpose discussed.

Return ONLY valid JSON, no explanations or markdown.\
"""

SUMMARIZE_PROMPT: str = """\
You are a professional meeting minutes assistant. Create a comprehensive \
summary in clear, readable format using British English spelling and \
terminology throughout.

CRITICAL: You MUST use British English conventions including:
- "organisation" not "organization"
- "analyse" not "analyze"
- "prioritise" not "prioritize"
- "realise" not "realize"
- "behaviour" not "behavior"
- "colour" not "color"
- "centre" not "center"
- "licence" (noun) / "license" (verb)
- Use "whilst" instead of "while" where appropriate
- Use "amongst" instead of "among" where appropriate

Structure your response as follows:

# Meeting Summary: [Title]

## Meeting Overview
Brief overview of the meeting's purpose and main topics discussed.

## Key Decisions Made
- List the main decisions made during the meeting
- Include specific agreements or approvals

## Action Items
| Assignee | Task Description | Due Date | Priority | Status |
|----------|------------------|----------|----------|--------|
| [Name] | [Specific task] | [Date or TBD] | [High/Medium/Low] | [Not Started] |

## Discussion Points & Strategic Insights
**Key Topics Discussed:**
- Main discussion themes and important points raised
- Strategic insights and considerations

**Technical/Operational Notes:**
- Technical details discussed
- Operational considerations

## Financial & Resource Implications
- Budget considerations mentioned
- Resource allocation discussions
- Cost implications

## Next Steps & Follow-up Actions
- Planned next steps
- Follow-up meetings scheduled
- Documentation to be prepared

## Outstanding Issues
- Unresolved items requiring attention
- Pending decisions or approvals needed

Use professional British English throughout. Focus on extracting real \
information from the content provided, not generic templates.\
"""

QUERY_PROMPT: str = """\
You are a meeting analysis assistant using British English. Answer the \
user's question about the provided meeting data using British spelling and \
terminology (organisation, analyse, prioritise, etc.). Be specific and \
reference actual meeting content when possible. If the information isn't \
available in the meetings provided, say so clearly.

Format your response in a clear, professional manner with bullet points or \
structured text as appropriate.\
"""


# -- Task Profiles ------------------------------------------------------------


@dataclass(frozen=True)
class TaskProfile:
    """Instruction template and generation parameters for one task type."""

    template: str
    temperature: float
    max_output_tokens: int


DEFAULT_TASK_PROFILES: dict[TaskType, TaskProfile] = {
    TaskType.EXTRACT: TaskProfile(EXTRACT_PROMPT, temperature=0.1, max_output_tokens=400),
    TaskType.SUMMARIZE: TaskProfile(SUMMARIZE_PROMPT, temperature=0.7, max_output_tokens=2500),
    TaskType.QUERY: TaskProfile(QUERY_PROMPT, temperature=0.7, max_output_tokens=800),
}


class PromptBuilder:
    """Builds the generation request for a task.

    Args:
        profiles: Task profile table. Defaults to DEFAULT_TASK_PROFILES.
    """

    def __init__(self, profiles: dict[TaskType, TaskProfile] | None = None) -> None:
        self._profiles = dict(profiles or DEFAULT_TASK_PROFILES)
        missing = set(TaskType) - set(self._profiles)
        if missing:
            raise ValueError(f"Missing task profiles: {sorted(t.value for t in missing)}")

    @classmethod
    def from_settings(cls, settings: Settings) -> PromptBuilder:
        """Create a builder whose parameters come from settings."""
        return cls(
            {
                TaskType.EXTRACT: TaskProfile(
                    EXTRACT_PROMPT,
                    temperature=settings.EXTRACT_TEMPERATURE,
                    max_output_tokens=settings.EXTRACT_MAX_TOKENS,
                ),
                TaskType.SUMMARIZE: TaskProfile(
                    SUMMARIZE_PROMPT,
                    temperature=settings.SUMMARIZE_TEMPERATURE,
                    max_output_tokens=settings.SUMMARIZE_MAX_TOKENS,
                ),
                TaskType.QUERY: TaskProfile(
                    QUERY_PROMPT,
                    temperature=settings.QUERY_TEMPERATURE,
                    max_output_tokens=settings.QUERY_MAX_TOKENS,
                ),
            }
        )

    def profile(self, task_type: TaskType) -> TaskProfile:
        return self._profiles[task_type]

    def build(self, task_type: TaskType, content: str) -> GenerationRequest:
        """Concatenate the task template with the raw content.

        Content is neither truncated nor sanitized.

        Args:
            task_type: Validated task type.
            content: Text to analyse (filename, transcript, or question + data).

        Returns:
            Immutable GenerationRequest for the task.
        """
        profile = self._profiles[task_type]
        return GenerationRequest(
            instruction_text=f"{profile.template}{CONTENT_SEPARATOR}{content}",
            temperature=profile.temperature,
            max_output_tokens=profile.max_output_tokens,
        )
