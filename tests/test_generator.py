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
from datetime import date

from candidate_report.generator import (
    EducationBlock,
    ExperienceBlock,
    InfoTable,
    ReportAssembler,
    TextBlock,
    format_narrative,
    german_date,
)
from candidate_report.models import (
    Assignment,
    CandidateRecord,
    ClientInfo,
    EducationEntry,
    ExperienceEntry,
    PersonalData,
    ReportSections,
)


def _record(name="Anna Berg"):
    return CandidateRecord(
        personal_data=PersonalData(
            name=name,
            address="Hauptstr. 1\n80331 München",
            age=44,
            birthdate="1980-03-02",
            languages={"Deutsch": "Muttersprache", "Englisch": "fließend"},
        ),
        experience=[
            ExperienceEntry(years="2021-01-01 - Present", title="CFO", company="Acme AG", location="München"),
            ExperienceEntry(years="2015-01-01 - 2020-12-31", title="Controller", company="Beta GmbH"),
        ],
        education=[
            EducationEntry(years="2005 - 2010", degree="MSc", institution="LMU", field="BWL"),
            EducationEntry(years="2000 - 2005", degree="BSc", institution="TUM", field="Informatik",
                           description="Schwerpunkt Statistik"),
        ],
    )


SECTIONS = ReportSections(
    personality_section="Erster Absatz -- mit Einschub.\n\nZweiter Absatz.",
    summary_section="Fazit.",
)


def _blocks(page, kind):
    return [b for b in page.blocks if isinstance(b, kind)]


class TestMarkdown(unittest.TestCase):
    def test_contains_name_and_sections_verbatim(self):
        markdown = ReportAssembler().to_markdown(_record(), SECTIONS)
        self.assertEqual(
            markdown,
            "# Candidate Report for Anna Berg\n\n"
            "## PERSÖNLICHKEIT\n"
            "Erster Absatz -- mit Einschub.\n\nZweiter Absatz.\n\n"
            "## ZUSAMMENFASSUNG\n"
            "Fazit.\n",
        )

    def test_default_name(self):
        markdown = ReportAssembler().to_markdown(_record(name=""), ReportSections())
        self.assertTrue(markdown.startswith("# Candidate Report for Candidate\n"))


class TestPaginatedDocument(unittest.TestCase):
    def setUp(self):
        assignment = Assignment(id=5, name="CFO Search", client=ClientInfo(name="Acme AG"))
        self.document = ReportAssembler().to_paginated_document(
            _record(), SECTIONS, assignment, today=date(2024, 3, 5))
        self.pages = {page.kind: page for page in self.document.pages}

    def test_page_order_and_headers(self):
        self.assertEqual(self.document.page_kinds,
                         ["cover", "personal", "experience", "education", "personality", "summary"])
        self.assertEqual([p.header for p in self.document.pages], [
            f"Vertraulicher Bericht Anna Berg - {n} -" for n in range(2, 7)
        ])

    def test_cover(self):
        cover = self.document.cover
        self.assertEqual(cover.client_name, "Acme AG")
        self.assertEqual(cover.position, "Position: CFO Search")
        self.assertEqual(cover.date_text, "5. März 2024")
        self.assertIn("Signium International GmbH", cover.letterhead)
        self.assertTrue(cover.confidentiality.startswith("Dieser Vertrauliche Bericht"))

    def test_cover_without_assignment(self):
        document = ReportAssembler().to_paginated_document(_record(), SECTIONS, today=date(2024, 3, 5))
        self.assertEqual(document.cover.client_name, "Client")
        self.assertEqual(document.cover.position, "Position: ")

    def test_personal_rows(self):
        rows = {row.label: row.value for row in _blocks(self.pages["personal"], InfoTable)[0].rows}
        self.assertEqual(rows["Alter / Geburtsdatum:"], "44 J. / 1980-03-02")
        self.assertEqual(rows["Sprachkenntnisse:"], "Deutsch Muttersprache\nEnglisch fließend")
        self.assertEqual(rows["Adresse:"], "Hauptstr. 1\n80331 München")

        income = {row.label: row.value for row in _blocks(self.pages["personal"], InfoTable)[1].rows}
        self.assertEqual(income["Aktuelles Zielgehalt"], "€")
        self.assertEqual(income["Erwartung"], "")

    def test_age_zero_is_printed(self):
        record = _record()
        record.personal_data = PersonalData(name="Baby Berg", age=0, birthdate="2024-01-01")
        document = ReportAssembler().to_paginated_document(record, SECTIONS, today=date(2024, 3, 5))
        personal = {page.kind: page for page in document.pages}["personal"]
        rows = {row.label: row.value for row in _blocks(personal, InfoTable)[0].rows}
        self.assertEqual(rows["Alter / Geburtsdatum:"], "0 J. / 2024-01-01")

    def test_unknown_age(self):
        record = _record()
        record.personal_data = PersonalData(name="Anna Berg", age=None, birthdate="")
        document = ReportAssembler().to_paginated_document(record, SECTIONS, today=date(2024, 3, 5))
        personal = {page.kind: page for page in document.pages}["personal"]
        rows = {row.label: row.value for row in _blocks(personal, InfoTable)[0].rows}
        self.assertEqual(rows["Alter / Geburtsdatum:"], " / ")

    def test_experience_location_default(self):
        entries = _blocks(self.pages["experience"], ExperienceBlock)
        self.assertEqual([e.company_line for e in entries], ["Acme AG, München", "Beta GmbH, DE"])

    def test_further_training_only_on_first_education_entry(self):
        entries = _blocks(self.pages["education"], EducationBlock)
        self.assertEqual(len(entries), 2)
        self.assertEqual(len(entries[0].further_training), 2)
        self.assertEqual(entries[1].further_training, [])
        self.assertEqual(entries[0].description, "-")
        self.assertEqual(entries[1].degree_line, "Abschluss BSc")

    def test_narrative_paragraphs(self):
        text = _blocks(self.pages["personality"], TextBlock)[0]
        self.assertEqual(text.paragraphs, ["Erster Absatz — mit Einschub.", "Zweiter Absatz."])
        self.assertEqual(_blocks(self.pages["summary"], TextBlock)[0].paragraphs, ["Fazit."])


class TestHelpers(unittest.TestCase):
    def test_format_narrative(self):
        self.assertEqual(format_narrative(""), [])
        self.assertEqual(format_narrative("a\n\n\nb\n \nc"), ["a", "b", "c"])

    def test_german_date(self):
        self.assertEqual(german_date(date(2024, 12, 24)), "24. Dezember 2024")


if __name__ == '__main__':
    unittest.main()
