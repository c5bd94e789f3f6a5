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
Client for the Ezekia applicant-tracking API.
Fetches assignments, candidates and candidate details and normalizes them
into the records used for report generation.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from candidate_report.decoders import (
    decode_candidate,
    decode_education_resource,
    decode_embedded_positions,
    decode_position_resource,
    decode_project,
    normalize_assignment,
    normalize_candidate,
    normalize_education,
    normalize_experience,
    normalize_personal_data,
)
from candidate_report.education import EducationExtractor, KeywordEducationExtractor
from candidate_report.errors import EzekiaError
from candidate_report.models import Assignment, CandidateRecord, CandidateSummary

logger = logging.getLogger(__name__)

ASSIGNMENT_FIELDS = [
    "name",
    "status",
    "relationships.company",
    "contactPerson",
    "createdAt",
    "description",
    "candidates_count",
]

CANDIDATE_FIELDS = [
    "id",
    "name",
    "firstName",
    "lastName",
    "profilePicture",
    "profile.positions",
    "status",
    "experience_years",
]

PERSON_FIELDS = [
    "name",
    "firstName",
    "lastName",
    "emails",
    "phones",
    "address",
    "birthday",
    "maritalStatus",
    "nationality",
    "languages",
    "photo",
    "profile.positions",
]

PROJECT_FIELDS = [
    "name",
    "status",
    "client",
    "contactPerson",
    "createdAt",
    "description",
]


def _items(response: Dict[str, Any]) -> list:
    data = response.get("data") if isinstance(response, dict) else None
    return data if isinstance(data, list) else []


def _object(response: Dict[str, Any]) -> dict:
    data = response.get("data") if isinstance(response, dict) else None
    return data if isinstance(data, dict) else {}


class EzekiaClient:
    """
    Wraps an EzekiaGateway. Calls are issued one at a time and gateway errors
    are raised as EzekiaError without retrying.
    """
    def __init__(self, gateway, education_extractor: EducationExtractor = None):
        self.gateway = gateway
        self.education_extractor = education_extractor or KeywordEducationExtractor()

    def request(self, method: str, endpoint: str, params: Dict[str, Any] = None,
                body: Any = None) -> Dict[str, Any]:
        logger.debug(f"API Request: {method} {endpoint} params={params}")
        response = self.gateway.invoke(method, endpoint, params, body)

        if isinstance(response, dict) and response.get("error") is True:
            message = response.get("message") or "Failed to fetch data from Ezekia"
            logger.error(f"API Error ({endpoint}): {message}")
            raise EzekiaError(message)

        return response if isinstance(response, dict) else {"data": response}

    def list_assignments(self, limit: int = 100) -> List[Assignment]:
        logger.info("Fetching assignments...")
        params = {
            "isAssignment": True,
            "count": limit,
            "sortBy": "updatedAt",
            "sortOrder": "desc",
            "fields": ASSIGNMENT_FIELDS,
        }
        raw_items = _items(self.request("GET", "projects", params))

        assignments = []
        for raw in raw_items:
            try:
                assignments.append(normalize_assignment(decode_project(raw)))
            except (TypeError, ValueError, AttributeError, KeyError) as e:
                logger.warning(f"    > Malformed assignment record, using defaults: {e}")
                assignments.append(Assignment(id=raw.get("id") if isinstance(raw, dict) else None))

        logger.info(f"    > Received {len(assignments)} assignments")
        return assignments

    def list_candidates(self, assignment_id: Any, limit: int = 100) -> List[CandidateSummary]:
        logger.info(f"Fetching candidates for assignment {assignment_id}...")
        params = {
            "count": limit,
            "sortBy": "updatedAt",
            "sortOrder": "desc",
            "fields": CANDIDATE_FIELDS,
        }
        raw_items = _items(self.request("GET", f"projects/{assignment_id}/candidates", params))

        candidates = []
        for raw in raw_items:
            try:
                candidates.append(normalize_candidate(decode_candidate(raw)))
            except (TypeError, ValueError, AttributeError, KeyError) as e:
                logger.warning(f"    > Malformed candidate record, using defaults: {e}")
                candidates.append(CandidateSummary(id=raw.get("id") if isinstance(raw, dict) else None))

        logger.info(f"    > Received {len(candidates)} candidates")
        return candidates

    def get_candidate_detail(self, person_id: Any) -> Dict[str, Any]:
        logger.info(f"Fetching candidate details for person {person_id}")
        response = self.request("GET", f"v2/people/{person_id}", {"fields": PERSON_FIELDS})
        return _object(response)

    def get_positions(self, person_id: Any, detail: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        """
        Prefers the positions embedded in the person record and only queries
        the dedicated positions resource when the embedded list is absent.
        """
        if detail is None:
            detail = self.get_candidate_detail(person_id)

        embedded = decode_embedded_positions(detail)
        if embedded is not None:
            logger.info(f"    > Found {len(embedded.items)} positions in profile data")
            return embedded.items

        params = {"sortBy": "startDate", "sortOrder": "desc"}
        response = self.request("GET", f"v2/people/{person_id}/positions", params)
        resource = decode_position_resource(response.get("data"))
        logger.info(f"    > Positions fetched from dedicated endpoint: {len(resource.items)}")
        return resource.items

    def get_education(self, person_id: Any, positions: List[Dict[str, Any]] = None) -> list:
        """
        Recovers education from position summaries first. Only when nothing
        is found is the education resource queried; its failure yields [].
        """
        if positions is None:
            positions = self.get_positions(person_id)

        extracted = self.education_extractor.extract(positions)
        if extracted:
            return extracted

        params = {"sortBy": "start", "sortOrder": "desc"}
        try:
            response = self.request("GET", f"people/{person_id}/education", params)
        except EzekiaError as e:
            logger.info(f"    > Education endpoint unavailable ({e}), continuing without education")
            return []

        education = decode_education_resource(response.get("data"))
        logger.info(f"    > Education fetched from dedicated endpoint: {len(education)}")
        return education

    def get_project(self, project_id: Any) -> Dict[str, Any]:
        logger.info(f"Fetching project details for project {project_id}")
        response = self.request("GET", f"projects/{project_id}", {"fields": PROJECT_FIELDS})
        return _object(response)

    def get_all_candidate_data(self, person_id: Any, assignment_id: Optional[Any] = None,
                               today: date = None) -> CandidateRecord:
        """
        Collects everything needed for a report, one request at a time, and
        returns the normalized record.
        """
        logger.info(f"Getting all candidate data for person {person_id}")
        detail = self.get_candidate_detail(person_id)
        positions = self.get_positions(person_id, detail)
        education = self.get_education(person_id, positions)
        project = self.get_project(assignment_id) if assignment_id else {}

        return CandidateRecord(
            personal_data=normalize_personal_data(detail, today),
            education=normalize_education(education),
            experience=normalize_experience(positions),
            project_data=project,
        )
