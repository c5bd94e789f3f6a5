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
View state for the interactive console, plus the list filters and the
overview statistics shown above the assignment table.

Every fetch is tagged with a generation number for its channel. A result is
only applied if no newer fetch was started on that channel in the meantime,
so a late answer for a previously selected assignment can never overwrite
the current candidate list.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from candidate_report.models import Assignment, CandidateSummary, Report, ReportConfig

logger = logging.getLogger(__name__)

ASSIGNMENTS = "assignments"
CANDIDATES = "candidates"
REPORT = "report"
CHANNELS = (ASSIGNMENTS, CANDIDATES, REPORT)


@dataclass
class OverviewStats:
    active_assignments: int = 0
    total_assignments: int = 0
    active_candidates: int = 0
    total_candidates: int = 0

    @property
    def assignment_percent(self) -> int:
        return _percent(self.active_assignments, self.total_assignments)

    @property
    def candidate_percent(self) -> int:
        return _percent(self.active_candidates, self.total_candidates)


def _percent(part: int, total: int) -> int:
    # Half rounds up (12.5 -> 13), unlike round()
    return int(part * 100 / total + 0.5) if total else 0


@dataclass
class ViewState:
    assignments: List[Assignment] = field(default_factory=list)
    candidates: List[CandidateSummary] = field(default_factory=list)
    selected_assignment: Optional[Assignment] = None
    selected_candidate: Optional[CandidateSummary] = None
    config: ReportConfig = field(default_factory=ReportConfig)
    report: Optional[Report] = None
    error: Optional[str] = None
    generations: Dict[str, int] = field(default_factory=lambda: {c: 0 for c in CHANNELS})

    def begin(self, channel: str) -> int:
        """Starts a fetch on `channel` and returns its token."""
        self.generations[channel] += 1
        return self.generations[channel]

    def invalidate(self, channel: str) -> None:
        self.generations[channel] += 1

    def is_current(self, channel: str, token: int) -> bool:
        return self.generations[channel] == token

    def apply(self, channel: str, token: int, value: Any) -> bool:
        if not self.is_current(channel, token):
            logger.debug(f"Discarding stale {channel} result (token {token}, current {self.generations[channel]})")
            return False
        setattr(self, _attribute(channel), value)
        self.error = None
        return True

    def fail(self, channel: str, token: int, message: str) -> bool:
        """Resets the channel to empty and records `message`, unless stale."""
        if not self.is_current(channel, token):
            logger.debug(f"Discarding stale {channel} error: {message}")
            return False
        setattr(self, _attribute(channel), None if channel == REPORT else [])
        self.error = message
        return True

    def select_assignment(self, assignment: Optional[Assignment]) -> None:
        self.selected_assignment = assignment
        self.selected_candidate = None
        self.candidates = []
        self.report = None
        self.invalidate(CANDIDATES)
        self.invalidate(REPORT)

    def select_candidate(self, candidate: Optional[CandidateSummary]) -> None:
        self.selected_candidate = candidate
        self.report = None
        self.invalidate(REPORT)

    def dismiss_error(self) -> None:
        self.error = None


def _attribute(channel: str) -> str:
    if channel not in CHANNELS:
        raise ValueError(f"Unknown channel: {channel}")
    return channel


def filter_assignments(items: List[Assignment], term: str) -> List[Assignment]:
    term = (term or "").strip().lower()
    if not term:
        return list(items)
    return [
        a for a in items
        if term in (a.name or "").lower() or term in (a.client.name or "").lower()
    ]


def filter_candidates(items: List[CandidateSummary], term: str) -> List[CandidateSummary]:
    term = (term or "").strip().lower()
    if not term:
        return list(items)

    def haystack(candidate: CandidateSummary) -> List[str]:
        position = candidate.current_position
        company = position.get("company")
        company_name = company.get("name") if isinstance(company, dict) else company
        return [candidate.name or "", position.get("title") or "", company_name or ""]

    return [c for c in items if any(term in text.lower() for text in haystack(c))]


def overview_stats(assignments: List[Assignment], candidates: List[CandidateSummary]) -> OverviewStats:
    return OverviewStats(
        active_assignments=sum(1 for a in assignments if a.status == "Active"),
        total_assignments=len(assignments),
        active_candidates=sum(1 for c in candidates if c.status == "Active"),
        total_candidates=len(candidates),
    )
