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
Ties the data client, narrative generator, assembler, renderers and file
export together for the console flow.
"""

import logging
from datetime import date
from typing import Any, List, Optional

from candidate_report.errors import ConfigurationError
from candidate_report.export import ExportResult, report_filename, save_binary_file, save_text_file
from candidate_report.ezekia_client import EzekiaClient
from candidate_report.gateway import EzekiaGateway
from candidate_report.generator import ReportAssembler
from candidate_report.llm_client import LLMClient
from candidate_report.models import Assignment, CandidateSummary, Report, ReportConfig
from candidate_report.renderers import DocxRenderer, HtmlRenderer, PdfRenderer
from candidate_report.settings import EZEKIA_KEY, OPENAI_KEY, CredentialStore

logger = logging.getLogger(__name__)

KEY_LABELS = {
    EZEKIA_KEY: "Ezekia API key",
    OPENAI_KEY: "OpenAI API key",
}


class ReportService:
    def __init__(self, store: CredentialStore = None, client: EzekiaClient = None,
                 llm_client: LLMClient = None, assembler: ReportAssembler = None,
                 output_dir: str = None, limit: int = 100):
        self.store = store or CredentialStore()
        self.client = client or EzekiaClient(EzekiaGateway.from_store(self.store))
        self.llm_client = llm_client
        self.assembler = assembler or ReportAssembler()
        self.output_dir = output_dir
        self.limit = limit

    def missing_credentials(self, *keys: str) -> List[str]:
        keys = keys or (EZEKIA_KEY, OPENAI_KEY)
        return [key for key in keys if not self.store.get(key)]

    def require_credentials(self, *keys: str) -> None:
        missing = self.missing_credentials(*keys)
        if missing:
            labels = ", ".join(KEY_LABELS.get(k, k) for k in missing)
            raise ConfigurationError(f"Missing credentials: {labels}")

    def fetch_assignments(self) -> List[Assignment]:
        self.require_credentials(EZEKIA_KEY)
        return self.client.list_assignments(limit=self.limit)

    def fetch_candidates(self, assignment_id: Any) -> List[CandidateSummary]:
        self.require_credentials(EZEKIA_KEY)
        return self.client.list_candidates(assignment_id, limit=self.limit)

    def _narrative_client(self) -> LLMClient:
        # Built per report so a key entered in the setup prompt is picked up
        return self.llm_client or LLMClient(self.store.get(OPENAI_KEY))

    def generate_report(self, candidate_id: Any, assignment_id: Optional[Any] = None,
                        config: ReportConfig = None) -> Report:
        """
        Fetches the candidate record and asks the model for the narrative
        sections. Only the parts enabled in `config` are sent to the model;
        the returned report keeps the full record.
        """
        config = config or ReportConfig()
        self.require_credentials(EZEKIA_KEY, OPENAI_KEY)
        if not config.is_valid:
            raise ConfigurationError("Select at least one section to include in the report")

        logger.info(f"Generating report for candidate {candidate_id}")
        record = self.client.get_all_candidate_data(candidate_id, assignment_id)
        sections = self._narrative_client().generate_report_sections(record.filtered(config))
        return Report(candidate_data=record, report_sections=sections)

    def export_markdown(self, report: Report) -> ExportResult:
        content = self.assembler.to_markdown(report.candidate_data, report.report_sections)
        return save_text_file(content, report_filename(report.candidate_name, "md"), self.output_dir)

    def _document(self, report: Report, assignment: Assignment = None, today: date = None):
        return self.assembler.to_paginated_document(
            report.candidate_data, report.report_sections, assignment, today
        )

    def _render(self, renderer, report: Report, assignment: Assignment = None, today: date = None):
        """Returns (output, None) or (None, ExportResult) when the renderer fails."""
        try:
            return renderer.render(self._document(report, assignment, today)), None
        except Exception as e:
            logger.error(f"{type(renderer).__name__} failed for '{report.candidate_name}': {e}")
            return None, ExportResult(success=False, message=f"Rendering failed: {e}")

    def export_pdf(self, report: Report, assignment: Assignment = None, today: date = None) -> ExportResult:
        data, failure = self._render(PdfRenderer(), report, assignment, today)
        if failure:
            return failure
        return save_binary_file(data, report_filename(report.candidate_name, "pdf"), self.output_dir)

    def export_docx(self, report: Report, assignment: Assignment = None, today: date = None) -> ExportResult:
        data, failure = self._render(DocxRenderer(), report, assignment, today)
        if failure:
            return failure
        return save_binary_file(data, report_filename(report.candidate_name, "docx"), self.output_dir)

    def export_html(self, report: Report, assignment: Assignment = None, today: date = None) -> ExportResult:
        content, failure = self._render(HtmlRenderer(), report, assignment, today)
        if failure:
            return failure
        return save_text_file(content, report_filename(report.candidate_name, "html"), self.output_dir)
