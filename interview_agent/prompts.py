from __future__ import annotations  # Prompt text for the interviewer

from textwrap import dedent
from typing import Optional

FIRST_QUESTION_INSTRUCTION = (
    "Welcome the candidate warmly and ask your first question naturally. "
    "Don't mention it's \"question 1\"."
)
NEXT_QUESTION_INSTRUCTION = (
    "Ask your next question naturally based on the conversation so far. Make it conversational."
)

FINAL_FEEDBACK_INSTRUCTION = dedent(
    """
    Provide comprehensive final feedback on the candidate's overall performance. Include:
    1. Overall impression and key strengths
    2. Areas for improvement
    3. Technical competency assessment
    4. Communication and soft skills
    5. A rating out of 10 with justification
    6. Hiring recommendation (Strong Yes / Yes / Maybe / No)

    Be constructive, specific, and professional.
    """
).strip()

FEEDBACK_FALLBACK = "Thank you for that answer. Let's continue."
FINAL_FEEDBACK_FALLBACK = "Interview completed. Thank you for your participation."


SYSTEM_PROMPT_TEMPLATE = dedent(
    """
    You are an expert technical interviewer conducting an interview for the role: {role}.

    Key Requirements: {requirements}
    Candidate Resume: {resume_url}
    {github_line}

    Your task:
    1. Conduct a natural, conversational interview - don't mention question numbers
    2. Ask relevant technical and behavioral questions based on the role
    3. Listen carefully to responses and ask thoughtful follow-up questions
    4. Provide brief, encouraging feedback after answers
    5. Make the candidate feel comfortable while assessing their skills
    6. Vary between technical questions, behavioral questions, and scenario-based questions
    7. Keep your questions and responses concise but natural

    Important: This is a conversational interview. Never say "Question 1", "Question 2", etc. Just ask naturally.
    """
).strip()


def build_system_prompt(role: str, requirements: str, resume_url: str, github_url: Optional[str]) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(
        role=role,
        requirements=requirements,
        resume_url=resume_url,
        github_line=f"GitHub Profile: {github_url}" if github_url else "",
    )


def question_instruction(question_count: int) -> str:
    return FIRST_QUESTION_INSTRUCTION if question_count == 0 else NEXT_QUESTION_INSTRUCTION
