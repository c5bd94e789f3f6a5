# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Client for the OpenAI chat completion API.
Writes the narrative sections (personality, summary) of a candidate report.
"""

import logging
import re

import openai

from candidate_report.decoders import clean_text
from candidate_report.errors import ConfigurationError, NarrativeError
from candidate_report.models import CandidateRecord, ReportSections
from candidate_report.settings import configure_ssl_env, get_settings

# Logger is configured in main.py
logger = logging.getLogger(__name__)

PERSONALITY_HEADING = "PERSÖNLICHKEIT"
SUMMARY_HEADING = "ZUSAMMENFASSUNG"

SYSTEM_PROMPT = "You are an executive search specialist who writes professional candidate profiles."

TEMPERATURE = 0.7
MAX_TOKENS = 1500

# Heading decoration left behind after splitting, e.g. "**", "## " or "2." on its own line
_LEADING_MARKUP = re.compile(r"^[\s:*#]+")
_TRAILING_MARKUP = re.compile(r"\n[ \t#*]*(?:\d+\.)?[ \t#*]*$")


def _tidy(text: str) -> str:
    text = _LEADING_MARKUP.sub("", clean_text(text).strip())
    return _TRAILING_MARKUP.sub("", text).strip()


def split_sections(text: str, first: str = PERSONALITY_HEADING,
                   second: str = SUMMARY_HEADING) -> ReportSections:
    """
    Splits the model reply at the two section headings.
    A missing first heading yields two empty sections; a missing second
    heading yields an empty summary.
    """
    if not text or first not in text:
        logger.warning(f"Heading '{first}' not found in model reply. Sections left empty.")
        return ReportSections()

    remainder = text.split(first, 1)[1]
    if second in remainder:
        personality, summary = remainder.split(second, 1)
        return ReportSections(personality_section=_tidy(personality), summary_section=_tidy(summary))

    logger.warning(f"Heading '{second}' not found in model reply. Summary left empty.")
    return ReportSections(personality_section=_tidy(remainder), summary_section="")


class LLMClient:
    """
    Builds the report prompt from a candidate record and asks the model
    for the two narrative sections.
    """
    def __init__(self, api_key: str, model: str = None):
        self.api_key = api_key
        self.model = model or get_settings().openai_model

    def build_prompt(self, record: CandidateRecord) -> str:
        personal = record.personal_data
        experience = record.experience
        education = record.education

        experience_text = "\n".join(
            f"- {pos.years}: {pos.title} at {pos.company}\n  {pos.description}"
            for pos in experience
        )
        education_text = "\n".join(
            f"- {edu.years}: {edu.degree} in {edu.field} at {edu.institution}"
            for edu in education
        )
        languages = ", ".join(f"{lang} ({level})" for lang, level in personal.languages.items())

        if experience:
            current_role = f"{experience[0].title or 'N/A'} at {experience[0].company or 'N/A'}"
        else:
            current_role = "N/A"

        age = personal.age if personal.age is not None else "N/A"

        return f"""
Create a professional executive search report for:

# Candidate Profile
Name: {personal.name or 'N/A'}
Current Position: {current_role}
Age: {age}
Nationality: {personal.nationality or 'N/A'}
Languages: {languages}

# Work Experience
{experience_text}

# Education
{education_text}

# Task
Write two detailed sections in German:

1. {PERSONALITY_HEADING} (Personality) - ~350 words describing the candidate's character, leadership style, and professional demeanor based on their career trajectory.

2. {SUMMARY_HEADING} (Summary) - ~450 words comprehensive overview of their professional profile, key achievements, and unique value proposition.

Guidelines:
- Use formal German
- Write in third-person
- Provide specific details rather than generic descriptions
- Format as single paragraphs with no bullet points
- Be consistent with the candidate's background

Return with headings "{PERSONALITY_HEADING}" and "{SUMMARY_HEADING}".
"""

    def request_completion(self, prompt: str) -> str:
        """Single chat completion call. No streaming, no retry."""
        if not self.api_key:
            raise ConfigurationError("OpenAI API key not configured")

        # Ensure custom CA bundle is visible to the httpx-based SDK
        configure_ssl_env()

        try:
            client = openai.OpenAI(api_key=self.api_key)
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        except openai.OpenAIError as e:
            message = getattr(e, "message", None) or str(e) or "Failed to generate report text"
            logger.error(f"OpenAI API Error: {message}")
            raise NarrativeError(message) from e

        try:
            return response.choices[0].message.content or ""
        except (AttributeError, IndexError) as e:
            raise NarrativeError("Failed to generate report text") from e

    def split_sections(self, text: str) -> ReportSections:
        return split_sections(text)

    def generate_report_sections(self, record: CandidateRecord) -> ReportSections:
        logger.info(f"Generating report sections with {self.model}...")
        prompt = self.build_prompt(record)
        text = self.request_completion(prompt)
        sections = self.split_sections(text)
        logger.info(
            f"    > Personality: {len(sections.personality_section.split())} words, "
            f"Summary: {len(sections.summary_section.split())} words"
        )
        return sections
