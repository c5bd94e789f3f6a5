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
Assembles candidate reports.

The assembler is pure: it turns a candidate record plus the narrative sections
into either a Markdown string or a ReportDocument, an ordered list of logical
pages that the renderers in renderers.py lay out as PDF, DOCX or HTML.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Union

from candidate_report.llm_client import PERSONALITY_HEADING, SUMMARY_HEADING
from candidate_report.models import Assignment, CandidateRecord, ReportSections

logger = logging.getLogger(__name__)

REPORT_TITLE = "Vertraulicher Bericht"

GERMAN_MONTHS = (
    "Januar", "Februar", "März", "April", "Mai", "Juni",
    "Juli", "August", "September", "Oktober", "November", "Dezember",
)

CONFIDENTIALITY_CLAUSE = (
    "Dieser Vertrauliche Bericht enthält zum Teil Informationen, die uns unter Zusicherung "
    "strengster Vertraulichkeit mitgeteilt wurden. Entsprechend unseren berufsethischen "
    "Prinzipien müssen wir Sie dazu verpflichten, nur einer begrenzten Auswahl von Personen, "
    "die sich direkt mit der Auswertung befassen, Einsicht in diese Berichte zu gewähren. "
    "Der Inhalt muss auch jeglichen Drittpersonen gegenüber geheim gehalten werden. Es dürfen "
    "keinerlei Referenzen ohne Zustimmung des Kandidaten oder unsererseits eingeholt werden."
)

# Template note printed under the most recent education entry only
FURTHER_TRAINING_NOTE = [
    "Development Center for Potential Leaders und Präsentationstraining – "
    "Storyline und Visualisierung (beides 2024)",
    "Diverse Course auf Coursera (Data Analysis, RPA, etc.)",
]

INCOME_LABELS = [
    ("Aktuelles Zielgehalt", "€"),
    ("davon fix", "€"),
    ("davon variabel", "€"),
    ("Sonstiges", ""),
    ("Erwartung", ""),
]

AVAILABILITY_LABELS = [
    ("Kündigungsfrist", "Monate zum Monatsende"),
    ("Umzugsbereitschaft", ""),
]


@dataclass
class Branding:
    """Letterhead printed on the cover page."""
    firm: str = "Signium International GmbH"
    presenter: str = "Marcus Kötting"
    address_lines: List[str] = field(default_factory=lambda: [
        "Mauerkircherstraße 181",
        "81925 München",
    ])
    contact_lines: List[str] = field(default_factory=lambda: [
        "t +49 (0)89 927 96 150",
        "e marcus.koetting@signium.de",
        "w signium.de",
    ])
    tagline: str = "OFFICES WORLDWIDE"

    @property
    def letterhead(self) -> List[str]:
        return [self.firm, self.presenter, *self.address_lines, *self.contact_lines]


# --- Document description ---

@dataclass
class Heading:
    text: str
    level: int = 2

@dataclass
class InfoRow:
    """Two-column label / value row; `value` may contain newlines."""
    label: str
    value: str = ""

@dataclass
class InfoTable:
    rows: List[InfoRow] = field(default_factory=list)

@dataclass
class ExperienceBlock:
    years: str
    company_line: str
    title: str
    description: str

@dataclass
class EducationBlock:
    years: str
    degree_line: str
    institution: str
    field: str
    description: str
    further_training: List[str] = field(default_factory=list)

@dataclass
class TextBlock:
    paragraphs: List[str] = field(default_factory=list)
    title: str = ""

Block = Union[Heading, InfoTable, ExperienceBlock, EducationBlock, TextBlock]

@dataclass
class CoverPage:
    letterhead: List[str]
    tagline: str
    title: str
    candidate_name: str
    client_name: str
    position: str
    location: str
    presenter: str
    date_text: str
    confidentiality: str

@dataclass
class Page:
    kind: str
    header: str
    blocks: List[Block] = field(default_factory=list)

@dataclass
class ReportDocument:
    title: str
    candidate_name: str
    cover: CoverPage
    pages: List[Page] = field(default_factory=list)

    @property
    def page_kinds(self) -> List[str]:
        return ["cover"] + [p.kind for p in self.pages]


def german_date(day: date) -> str:
    return f"{day.day}. {GERMAN_MONTHS[day.month - 1]} {day.year}"


def format_narrative(text: str) -> List[str]:
    """Double hyphens become an em dash; paragraphs split on blank lines."""
    if not text:
        return []
    text = text.replace("--", "—")
    return [p for p in re.split(r"\n\s*\n+", text) if p.strip()]


class ReportAssembler:
    """
    Builds Markdown and paginated report descriptions from a candidate
    record and its narrative sections. No network or file access.
    """
    def __init__(self, branding: Branding = None):
        self.branding = branding or Branding()

    def to_markdown(self, record: CandidateRecord, sections: ReportSections) -> str:
        candidate_name = record.personal_data.name or "Candidate"
        return (
            f"# Candidate Report for {candidate_name}\n"
            f"\n"
            f"## {PERSONALITY_HEADING}\n"
            f"{sections.personality_section}\n"
            f"\n"
            f"## {SUMMARY_HEADING}\n"
            f"{sections.summary_section}\n"
        )

    def to_paginated_document(self, record: CandidateRecord, sections: ReportSections,
                              assignment: Optional[Assignment] = None,
                              today: date = None) -> ReportDocument:
        name = record.personal_data.name
        today = today or date.today()

        builders = [
            ("personal", self._personal_blocks),
            ("experience", self._experience_blocks),
            ("education", self._education_blocks),
            ("personality", self._personality_blocks),
            ("summary", self._summary_blocks),
        ]

        pages = []
        for number, (kind, build) in enumerate(builders, start=2):
            pages.append(Page(
                kind=kind,
                header=f"{REPORT_TITLE} {name} - {number} -",
                blocks=build(record, sections),
            ))

        logger.debug(f"Assembled report document with {len(pages) + 1} pages for '{name}'")
        return ReportDocument(
            title=f"{REPORT_TITLE} {name}",
            candidate_name=name,
            cover=self._cover(record, assignment, today),
            pages=pages,
        )

    def _cover(self, record: CandidateRecord, assignment: Optional[Assignment], today: date) -> CoverPage:
        client_name = "Client"
        position = ""
        if assignment is not None:
            client_name = assignment.client.name or "Client"
            position = assignment.name or ""

        return CoverPage(
            letterhead=self.branding.letterhead,
            tagline=self.branding.tagline,
            title=REPORT_TITLE,
            candidate_name=record.personal_data.name,
            client_name=client_name,
            position=f"Position: {position}",
            location="Standort:",
            presenter=self.branding.presenter,
            date_text=german_date(today),
            confidentiality=CONFIDENTIALITY_CLAUSE,
        )

    def _personal_blocks(self, record: CandidateRecord, sections: ReportSections) -> List[Block]:
        personal = record.personal_data
        age = f"{personal.age} J." if personal.age is not None else ""
        languages = "\n".join(f"{lang} {level}".strip() for lang, level in personal.languages.items())

        return [
            Heading("Persönliche Daten"),
            InfoTable([
                InfoRow("Name:", personal.name),
                InfoRow("Adresse:", personal.address),
                InfoRow("Telefonnummer:", personal.phone),
                InfoRow("Email:", personal.email),
                InfoRow("Alter / Geburtsdatum:", f"{age} / {personal.birthdate}"),
                InfoRow("Familienstand:", personal.marital_status),
                InfoRow("Nationalität:", personal.nationality),
                InfoRow("Sprachkenntnisse:", languages),
            ]),
            Heading("Einkommen (wie von dem Kandidaten angegeben)", level=3),
            InfoTable([InfoRow(label, value) for label, value in INCOME_LABELS]),
            InfoTable([InfoRow(label, value) for label, value in AVAILABILITY_LABELS]),
        ]

    def _experience_blocks(self, record: CandidateRecord, sections: ReportSections) -> List[Block]:
        blocks: List[Block] = [
            Heading("Beurteilung und Empfehlung"),
            Heading("Beruflich-fachliche Erfahrung", level=3),
        ]
        for exp in record.experience:
            blocks.append(ExperienceBlock(
                years=exp.years,
                company_line=f"{exp.company}, {exp.location}" if exp.location else f"{exp.company}, DE",
                title=exp.title,
                description=exp.description,
            ))
        return blocks

    def _education_blocks(self, record: CandidateRecord, sections: ReportSections) -> List[Block]:
        blocks: List[Block] = [Heading("Theoretische Ausbildung:", level=3)]
        for index, edu in enumerate(record.education):
            blocks.append(EducationBlock(
                years=edu.years,
                degree_line=f"Abschluss {edu.degree}",
                institution=edu.institution,
                field=edu.field,
                description=edu.description or "-",
                further_training=list(FURTHER_TRAINING_NOTE) if index == 0 else [],
            ))
        return blocks

    def _personality_blocks(self, record: CandidateRecord, sections: ReportSections) -> List[Block]:
        return [
            Heading("Persönlichkeit und Fähigkeiten"),
            TextBlock(format_narrative(sections.personality_section), title=PERSONALITY_HEADING),
        ]

    def _summary_blocks(self, record: CandidateRecord, sections: ReportSections) -> List[Block]:
        return [TextBlock(format_narrative(sections.summary_section), title=SUMMARY_HEADING)]
