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
Recovers education entries from work experience free text.

Ezekia rarely has a populated education resource, so positions whose summary
mentions training or study are turned into education entries.
"""

import logging
from typing import Any, Dict, Iterable, List, Protocol, Sequence

from candidate_report.decoders import SynthesizedEducation, plain_text, position_years

logger = logging.getLogger(__name__)

GERMAN_EDUCATION_KEYWORDS = ("ausbildung", "studium", "universität", "schule")


class EducationExtractor(Protocol):
    def extract(self, positions: Iterable[Dict[str, Any]]) -> List[SynthesizedEducation]:
        ...


class KeywordEducationExtractor:
    """
    Flags a position as education when its summary contains one of the
    keywords (case-insensitive substring match).
    """
    def __init__(self, keywords: Sequence[str] = GERMAN_EDUCATION_KEYWORDS):
        self.keywords = tuple(k.lower() for k in keywords)

    def matches(self, summary: str) -> bool:
        text = summary.lower()
        return any(k in text for k in self.keywords)

    def extract(self, positions: Iterable[Dict[str, Any]]) -> List[SynthesizedEducation]:
        entries = []
        for pos in positions or []:
            if not isinstance(pos, dict):
                continue
            summary = pos.get("summary")
            if not isinstance(summary, str) or not self.matches(summary):
                continue

            company = pos.get("company")
            institution = (company.get("name") or "") if isinstance(company, dict) else ""
            entries.append(SynthesizedEducation(
                years=position_years(pos, year_only=True) if pos.get("startDate") else "",
                degree="Education/Training",
                institution=institution,
                field=pos.get("title") or "",
                description=plain_text(summary),
            ))

        if entries:
            logger.info(f"    > Extracted {len(entries)} education entries from position summaries")
        return entries


class NullEducationExtractor:
    """Disables the heuristic; education then only comes from the API."""
    def extract(self, positions: Iterable[Dict[str, Any]]) -> List[SynthesizedEducation]:
        return []
