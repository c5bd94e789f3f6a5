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
Data models for the candidate report application.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

@dataclass
class ClientInfo:
    """The client company an assignment is run for."""
    name: str = "No Client"
    logo: Optional[str] = None

@dataclass
class Assignment:
    """A client engagement / job requisition tracked in Ezekia."""
    id: Any = None
    name: str = "Unnamed Assignment"
    status: str = "Unknown"
    client: ClientInfo = field(default_factory=ClientInfo)
    contact_person: str = "N/A"
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    description: str = "No description available."
    candidate_count: int = 0

@dataclass
class CandidateSummary:
    """A candidate row as listed under one assignment."""
    id: Any = None
    name: str = "Unknown"
    status: str = "Active"
    photo: str = ""
    positions: List[Dict[str, Any]] = field(default_factory=list)
    experience_years: Any = "N/A"

    @property
    def current_position(self) -> Dict[str, Any]:
        return self.positions[0] if self.positions else {}

@dataclass
class PersonalData:
    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    age: Optional[int] = None
    birthdate: str = ""
    marital_status: str = ""
    nationality: str = ""
    languages: Dict[str, str] = field(default_factory=dict)
    photo: str = ""

@dataclass
class EducationEntry:
    """One education row of the report, `years` is "start - end"."""
    years: str = ""
    degree: str = ""
    institution: str = ""
    field: str = ""
    description: str = ""

@dataclass
class ExperienceEntry:
    """One work experience row of the report, `years` is "start - end"."""
    years: str = ""
    title: str = ""
    company: str = ""
    description: str = ""
    location: str = ""

@dataclass
class CandidateRecord:
    """
    Normalized candidate detail record used to build a report.
    Every field has an empty default so renderers only check for empty values.
    """
    personal_data: PersonalData = field(default_factory=PersonalData)
    education: List[EducationEntry] = field(default_factory=list)
    experience: List[ExperienceEntry] = field(default_factory=list)
    project_data: Dict[str, Any] = field(default_factory=dict)

    def filtered(self, config: "ReportConfig") -> "CandidateRecord":
        """Returns a copy holding only the parts enabled in `config`."""
        return replace(
            self,
            personal_data=self.personal_data if config.include_personal else PersonalData(),
            experience=list(self.experience) if config.include_experience else [],
            education=list(self.education) if config.include_education else [],
        )

@dataclass
class ReportSections:
    """The two narrative sections produced by the language model."""
    personality_section: str = ""
    summary_section: str = ""

@dataclass
class Report:
    candidate_data: CandidateRecord
    report_sections: ReportSections

    @property
    def candidate_name(self) -> str:
        return self.candidate_data.personal_data.name

@dataclass
class ReportConfig:
    """Selects which parts of the candidate record are sent to the model."""
    include_personal: bool = True
    include_experience: bool = True
    include_education: bool = True

    @property
    def is_valid(self) -> bool:
        return self.include_personal or self.include_experience or self.include_education
