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
Decoders for the response shapes Ezekia has used over time, and the
normalizers that turn any decoded shape into the records in models.py.

Each upstream resource gets one small dataclass per known shape. Decoders only
pick the shape; all defaulting happens in the normalize_* functions.
"""

import functools
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from bs4 import BeautifulSoup

from candidate_report.models import (
    Assignment,
    CandidateSummary,
    ClientInfo,
    EducationEntry,
    ExperienceEntry,
    PersonalData,
)

logger = logging.getLogger(__name__)

PRESENT = "Present"
OPEN_END_DATE = "9999-12-31"

# Word pastes vertical tab / form feed as soft line breaks
_LINE_BREAK_CHARS = re.compile(r"[\x0b\x0c]")
# Control characters not allowed in XML 1.0 (DOCX, HTML)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0e-\x1f]")


def clean_text(text: str) -> str:
    """Removes control characters that XML based formats reject."""
    return _CONTROL_CHARS.sub("", _LINE_BREAK_CHARS.sub("\n", text))


def _text(value: Any, default: str = "") -> str:
    """Returns a non-empty string for scalar values, `default` otherwise."""
    if isinstance(value, str):
        value = clean_text(value)
        return value if value.strip() else default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _name_of(value: Any) -> str:
    """Ezekia nests names either as a plain string or as {"name": ...}."""
    if isinstance(value, dict):
        return _text(value.get("name"))
    return _text(value)


def plain_text(value: Any) -> str:
    """Strips HTML markup that Ezekia keeps in rich-text summaries."""
    text = _text(value)
    if "<" not in text or ">" not in text:
        return text
    soup = BeautifulSoup(text, "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for p in soup.find_all("p"):
        p.append("\n\n")
    lines = (line.strip() for line in soup.get_text().splitlines())
    return "\n".join(lines).strip()


# --- Assignments ---

@dataclass
class ProjectWithRelationships:
    """Current shape: the client company sits under relationships.company."""
    raw: Dict[str, Any]

@dataclass
class ProjectWithClient:
    """Older shape: a top-level `client` object or plain client name."""
    raw: Dict[str, Any]

ProjectShape = Union[ProjectWithRelationships, ProjectWithClient]


def decode_project(raw: Any) -> ProjectShape:
    if not isinstance(raw, dict):
        raise TypeError(f"Expected an object for a project, got {type(raw).__name__}")
    if isinstance(raw.get("relationships"), dict):
        return ProjectWithRelationships(raw)
    return ProjectWithClient(raw)


def _client_info(shape: ProjectShape) -> ClientInfo:
    if isinstance(shape, ProjectWithRelationships):
        company = _dict(shape.raw["relationships"].get("company"))
        logo = _text(_dict(company.get("image")).get("url")) or None
        return ClientInfo(name=_text(company.get("name"), "No Client"), logo=logo)

    client = shape.raw.get("client")
    if isinstance(client, dict):
        logo = _text(client.get("logo")) or _text(_dict(client.get("image")).get("url")) or None
        return ClientInfo(name=_text(client.get("name"), "No Client"), logo=logo)
    return ClientInfo(name=_text(client, "No Client"))


def _count(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def normalize_assignment(shape: ProjectShape) -> Assignment:
    raw = shape.raw
    return Assignment(
        id=raw.get("id"),
        name=_text(raw.get("name"), "Unnamed Assignment"),
        status=_text(raw.get("status"), "Unknown"),
        client=_client_info(shape),
        contact_person=_name_of(raw.get("contactPerson")) or "N/A",
        created_at=_text(raw.get("createdAt")) or datetime.now().isoformat(),
        description=_text(raw.get("description"), "No description available."),
        candidate_count=_count(raw.get("candidates_count")),
    )


# --- Candidate list rows ---

@dataclass
class CandidateNamed:
    """Row carrying a combined `name`."""
    raw: Dict[str, Any]

@dataclass
class CandidateSplitName:
    """Row carrying only firstName / lastName."""
    raw: Dict[str, Any]

CandidateShape = Union[CandidateNamed, CandidateSplitName]


def decode_candidate(raw: Any) -> CandidateShape:
    if not isinstance(raw, dict):
        raise TypeError(f"Expected an object for a candidate, got {type(raw).__name__}")
    if _text(raw.get("name")):
        return CandidateNamed(raw)
    return CandidateSplitName(raw)


def display_name(raw: Dict[str, Any], default: str = "") -> str:
    name = _text(raw.get("name"))
    if name:
        return name
    joined = f"{_text(raw.get('firstName'))} {_text(raw.get('lastName'))}".strip()
    return joined or default


def _photo(raw: Dict[str, Any]) -> str:
    for key in ("profilePicture", "photo"):
        value = raw.get(key)
        if isinstance(value, dict):
            value = value.get("url")
        if _text(value):
            return _text(value)
    return ""


def embedded_positions(raw: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    """Returns profile.positions, or None when the field is absent."""
    positions = _dict(raw.get("profile")).get("positions")
    if isinstance(positions, list):
        return [p for p in positions if isinstance(p, dict)]
    return None


def normalize_candidate(shape: CandidateShape) -> CandidateSummary:
    raw = shape.raw
    if isinstance(shape, CandidateNamed):
        name = _text(raw["name"])
    else:
        name = display_name(raw, "Unknown")

    return CandidateSummary(
        id=raw.get("id"),
        name=name,
        status=_text(raw.get("status"), "Active"),
        photo=_photo(raw),
        positions=embedded_positions(raw) or [],
        experience_years=raw.get("experience_years") or "N/A",
    )


# --- Positions ---

@dataclass
class EmbeddedPositions:
    """Positions delivered inside the person record (profile.positions)."""
    items: List[Dict[str, Any]] = field(default_factory=list)

@dataclass
class PositionResource:
    """Positions delivered by the dedicated people/{id}/positions query."""
    items: List[Dict[str, Any]] = field(default_factory=list)

PositionsShape = Union[EmbeddedPositions, PositionResource]


def decode_embedded_positions(detail: Dict[str, Any]) -> Optional[EmbeddedPositions]:
    items = embedded_positions(_dict(detail))
    return EmbeddedPositions(items) if items is not None else None


def decode_position_resource(data: Any) -> PositionResource:
    items = data if isinstance(data, list) else []
    return PositionResource([p for p in items if isinstance(p, dict)])


def position_years(pos: Dict[str, Any], year_only: bool = False) -> str:
    """Formats "start - end"; a missing or 9999-12-31 end date is "Present"."""
    start = _text(pos.get("startDate"))
    end = _text(pos.get("endDate"))
    if not end or end == OPEN_END_DATE:
        end = PRESENT
    elif year_only:
        end = end[:4]
    if year_only:
        start = start[:4]
    return f"{start} - {end}"


def normalize_experience(positions: List[Dict[str, Any]]) -> List[ExperienceEntry]:
    entries = []
    for pos in positions or []:
        if not isinstance(pos, dict):
            continue
        entries.append(ExperienceEntry(
            years=position_years(pos),
            title=_text(pos.get("title")),
            company=_name_of(pos.get("company")),
            description=plain_text(pos.get("summary")),
            location=_name_of(pos.get("location")),
        ))
    return sort_by_end(entries)


# --- Education ---

@dataclass
class StructuredEducation:
    """A row of the people/{id}/education resource."""
    start_year: str = ""
    end_year: str = ""
    degree: str = ""
    institution: str = ""
    field: str = ""
    description: str = ""

@dataclass
class SynthesizedEducation:
    """An entry recovered from a position summary; already report-shaped."""
    years: str = ""
    degree: str = ""
    institution: str = ""
    field: str = ""
    description: str = ""

EducationShape = Union[StructuredEducation, SynthesizedEducation]


def _year(raw: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = _text(raw.get(key))
        if value:
            return value[:4]
    return ""


def decode_education_resource(data: Any) -> List[StructuredEducation]:
    rows = data if isinstance(data, list) else []
    decoded = []
    for raw in rows:
        if not isinstance(raw, dict):
            continue
        decoded.append(StructuredEducation(
            start_year=_year(raw, "startYear", "start"),
            end_year=_year(raw, "endYear", "end"),
            degree=_text(raw.get("degree")),
            institution=_name_of(raw.get("institution")),
            field=_text(raw.get("field")),
            description=plain_text(raw.get("description")),
        ))
    return decoded


def normalize_education(shapes: List[EducationShape]) -> List[EducationEntry]:
    entries = []
    for shape in shapes or []:
        if isinstance(shape, SynthesizedEducation):
            entries.append(EducationEntry(
                years=shape.years,
                degree=shape.degree,
                institution=shape.institution,
                field=shape.field,
                description=shape.description,
            ))
        elif isinstance(shape, StructuredEducation):
            entries.append(EducationEntry(
                years=f"{shape.start_year} - {shape.end_year}",
                degree=shape.degree,
                institution=shape.institution,
                field=shape.field,
                description=shape.description,
            ))
    return sort_by_end(entries)


# --- Sorting ---

def end_token(years: str) -> str:
    parts = (years or "").split(" - ", 1)
    return parts[1].strip() if len(parts) > 1 else ""


def _compare_end(a, b) -> int:
    end_a, end_b = end_token(a.years), end_token(b.years)
    if end_a == end_b:
        return 0
    if end_a == PRESENT:
        return -1
    if end_b == PRESENT:
        return 1
    return -1 if end_a > end_b else 1


def sort_by_end(entries: list) -> list:
    """Most recent end first, open-ended entries on top; stable for ties."""
    return sorted(entries, key=functools.cmp_to_key(_compare_end))


# --- Personal data ---

def parse_date(value: Any) -> Optional[date]:
    text = _text(value)
    if len(text) < 10:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def compute_age(birthdate: Any, today: date = None) -> Optional[int]:
    """
    Age in whole years: the year difference, minus one while this year's
    birthday has not been reached yet.
    """
    born = parse_date(birthdate)
    if born is None:
        return None
    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def format_birthdate(value: Any) -> str:
    born = parse_date(value)
    if born is None:
        return _text(value)
    return born.isoformat()


def format_address(detail: Dict[str, Any]) -> str:
    address = detail.get("address")
    if not address and isinstance(detail.get("addresses"), list) and detail["addresses"]:
        address = detail["addresses"][0]
    if isinstance(address, str):
        return address
    address = _dict(address)

    lines = []
    street = _text(address.get("street"))
    if street:
        lines.append(street)
    postal_code = _text(address.get("postalCode"))
    city = _text(address.get("city"))
    if postal_code and city:
        lines.append(f"{postal_code} {city}")
    elif city:
        lines.append(city)
    return "\n".join(lines)


def _first(items: Any, key: str) -> str:
    if not isinstance(items, list) or not items:
        return ""
    first = items[0]
    if isinstance(first, dict):
        return _text(first.get(key))
    return _text(first)


def flatten_languages(languages: Any) -> Dict[str, str]:
    result = {}
    for entry in languages if isinstance(languages, list) else []:
        if not isinstance(entry, dict):
            continue
        name = _name_of(entry.get("language"))
        if name:
            result[name] = _name_of(entry.get("level"))
    return result


def normalize_personal_data(detail: Dict[str, Any], today: date = None) -> PersonalData:
    detail = _dict(detail)
    photo = detail.get("photo")
    if isinstance(photo, dict):
        photo = photo.get("url")
    return PersonalData(
        name=display_name(detail),
        address=format_address(detail),
        phone=_first(detail.get("phones"), "number"),
        email=_first(detail.get("emails"), "email"),
        age=compute_age(detail.get("birthday"), today),
        birthdate=format_birthdate(detail.get("birthday")),
        marital_status=_text(detail.get("maritalStatus")),
        nationality=_name_of(detail.get("nationality")),
        languages=flatten_languages(detail.get("languages")),
        photo=_text(photo),
    )
