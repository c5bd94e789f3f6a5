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

import unittest

from candidate_report.models import Assignment, CandidateSummary, ClientInfo
from candidate_report.session import (
    ASSIGNMENTS,
    CANDIDATES,
    REPORT,
    ViewState,
    filter_assignments,
    filter_candidates,
    overview_stats,
)


class TestViewState(unittest.TestCase):
    def setUp(self):
        self.state = ViewState()

    def test_current_result_is_applied(self):
        token = self.state.begin(ASSIGNMENTS)
        self.assertTrue(self.state.apply(ASSIGNMENTS, token, [Assignment(id=1)]))
        self.assertEqual(len(self.state.assignments), 1)

    def test_stale_result_is_discarded(self):
        first = self.state.begin(CANDIDATES)
        second = self.state.begin(CANDIDATES)

        self.assertTrue(self.state.apply(CANDIDATES, second, [CandidateSummary(id="new")]))
        self.assertFalse(self.state.apply(CANDIDATES, first, [CandidateSummary(id="old")]))
        self.assertEqual([c.id for c in self.state.candidates], ["new"])

    def test_failure_resets_list_and_records_message(self):
        self.state.assignments = [Assignment(id=1)]
        token = self.state.begin(ASSIGNMENTS)
        self.assertTrue(self.state.fail(ASSIGNMENTS, token, "HTTP 500: Server Error"))
        self.assertEqual(self.state.assignments, [])
        self.assertEqual(self.state.error, "HTTP 500: Server Error")

    def test_stale_failure_is_ignored(self):
        stale = self.state.begin(REPORT)
        self.state.begin(REPORT)
        self.assertFalse(self.state.fail(REPORT, stale, "late error"))
        self.assertIsNone(self.state.error)

    def test_selecting_assignment_invalidates_candidate_fetch(self):
        in_flight = self.state.begin(CANDIDATES)
        self.state.candidates = [CandidateSummary(id=1)]
        self.state.selected_candidate = self.state.candidates[0]

        self.state.select_assignment(Assignment(id=2))

        self.assertEqual(self.state.candidates, [])
        self.assertIsNone(self.state.selected_candidate)
        self.assertIsNone(self.state.report)
        self.assertFalse(self.state.apply(CANDIDATES, in_flight, [CandidateSummary(id=99)]))
        self.assertEqual(self.state.candidates, [])

    def test_selecting_candidate_clears_report(self):
        self.state.report = object()
        in_flight = self.state.begin(REPORT)
        self.state.select_candidate(CandidateSummary(id=1))
        self.assertIsNone(self.state.report)
        self.assertFalse(self.state.is_current(REPORT, in_flight))

    def test_successful_apply_clears_error(self):
        self.state.error = "old"
        token = self.state.begin(ASSIGNMENTS)
        self.state.apply(ASSIGNMENTS, token, [])
        self.assertIsNone(self.state.error)


def _assignments():
    return [
        Assignment(id=1, name="CFO Search", status="Active", client=ClientInfo(name="Acme AG")),
        Assignment(id=2, name="Head of Sales", status="Closed", client=ClientInfo(name="Beta GmbH")),
        Assignment(id=3, name="CTO", status="Active"),
    ]


def _candidates():
    return [
        CandidateSummary(id=1, name="Anna Berg", positions=[{"title": "Controller", "company": {"name": "Acme"}}]),
        CandidateSummary(id=2, name="Carl Dorn", status="Rejected", positions=[{"title": "CFO", "company": "Zeta"}]),
        CandidateSummary(id=3, name="Eva Fink"),
    ]


class TestFilters(unittest.TestCase):
    def test_assignment_by_name_or_client(self):
        self.assertEqual([a.id for a in filter_assignments(_assignments(), "cfo")], [1])
        self.assertEqual([a.id for a in filter_assignments(_assignments(), "BETA")], [2])
        self.assertEqual(len(filter_assignments(_assignments(), "  ")), 3)

    def test_candidate_by_name_title_or_company(self):
        self.assertEqual([c.id for c in filter_candidates(_candidates(), "eva")], [3])
        self.assertEqual([c.id for c in filter_candidates(_candidates(), "controller")], [1])
        self.assertEqual([c.id for c in filter_candidates(_candidates(), "zeta")], [2])
        self.assertEqual(filter_candidates(_candidates(), "nobody"), [])


class TestOverviewStats(unittest.TestCase):
    def test_counts_and_percentages(self):
        stats = overview_stats(_assignments(), _candidates())
        self.assertEqual((stats.active_assignments, stats.total_assignments), (2, 3))
        self.assertEqual(stats.assignment_percent, 67)
        self.assertEqual((stats.active_candidates, stats.total_candidates), (2, 3))

    def test_half_rounds_up(self):
        assignments = [Assignment(status="Active")] + [Assignment(status="Closed")] * 7
        self.assertEqual(overview_stats(assignments, []).assignment_percent, 13)

    def test_empty(self):
        stats = overview_stats([], [])
        self.assertEqual(stats.assignment_percent, 0)
        self.assertEqual(stats.candidate_percent, 0)


if __name__ == '__main__':
    unittest.main()
