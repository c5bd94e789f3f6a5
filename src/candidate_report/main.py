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
Main entry point for the candidate report console.
"""

import argparse
import logging
import sys
from collections import deque
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text

from candidate_report.errors import ConfigurationError, ReportError
from candidate_report.models import ReportConfig
from candidate_report.service import ReportService
from candidate_report.session import (
    ASSIGNMENTS,
    CANDIDATES,
    REPORT,
    ViewState,
    filter_assignments,
    filter_candidates,
    overview_stats,
)
from candidate_report.settings import EZEKIA_KEY, OPENAI_KEY, set_ca_bundle_override

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("md", "pdf", "docx", "html")


class StatusLogHandler(logging.Handler):
    """
    Keeps the last N log lines for a scrolling status display.
    """
    def __init__(self, console, maxlen=5):
        super().__init__()
        self.console = console
        self.maxlen = maxlen
        self.logs = deque(maxlen=maxlen)
        self.live = None

    def emit(self, record):
        try:
            msg = self.format(record)
            self.logs.append(msg)
            if self.live:
                self.live.update(self.get_renderable())
        except Exception:
            self.handleError(record)

    def get_renderable(self):
        return Text("\n".join(self.logs), style="dim grey50")


def setup_logging(verbosity: int, quiet: bool = False, custom_handler: logging.Handler = None):
    """
    Configures logging:
    - File: user_content/logs/report.log (DEBUG)
    - Console: Default=INFO (status panel), -q=ERROR, -v=WARNING, -vv=INFO, -vvv=DEBUG
    """
    log_dir = Path("user_content/logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "report.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if quiet:
        level = logging.ERROR
    elif verbosity == 1:
        level = logging.WARNING
    elif verbosity == 2:
        level = logging.INFO
    elif verbosity >= 3:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handler = custom_handler or logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter('%(message)s'))
    root.addHandler(handler)

    # Silence some noisy libs if not in super debug
    if verbosity < 3:
        for name in ("httpx", "httpcore", "urllib3", "openai"):
            logging.getLogger(name).setLevel(logging.WARNING)


class ConsoleApp:
    """
    Interactive flow: assignments -> candidates -> report -> export.
    """
    def __init__(self, service: ReportService, console: Console, status_handler: StatusLogHandler = None):
        self.service = service
        self.console = console
        self.status_handler = status_handler
        self.state = ViewState()

    @contextmanager
    def working(self):
        """Shows the scrolling status log while a blocking call runs."""
        if not self.status_handler:
            yield
            return
        self.status_handler.logs.clear()
        with Live(self.status_handler.get_renderable(), refresh_per_second=4,
                  console=self.console, transient=True) as live:
            self.status_handler.live = live
            try:
                yield
            finally:
                self.status_handler.live = None

    def show_error(self):
        if self.state.error:
            self.console.print(Panel(self.state.error, title="Error", style="red"))
            self.state.dismiss_error()

    def ensure_credentials(self, force: bool = False) -> bool:
        """Blocking setup prompt shown while either API key is missing."""
        missing = self.service.missing_credentials()
        if not missing and not force:
            return True

        self.console.print(Panel(
            "Both an Ezekia API key and an OpenAI API key are required.\n"
            "Keys are stored locally in " + str(self.service.store.path),
            title="API Key Setup",
        ))
        ezekia_key = Prompt.ask("Ezekia API key", password=True,
                                default=self.service.store.get(EZEKIA_KEY), show_default=False)
        openai_key = Prompt.ask("OpenAI API key", password=True,
                                default=self.service.store.get(OPENAI_KEY), show_default=False)
        self.service.store.save_api_keys(ezekia_key.strip(), openai_key.strip())

        still_missing = self.service.missing_credentials()
        if still_missing:
            self.console.print("[red]Both keys must be provided to continue.[/red]")
            return False
        logger.info("API keys saved.")
        return True

    def load_assignments(self):
        token = self.state.begin(ASSIGNMENTS)
        try:
            with self.working():
                assignments = self.service.fetch_assignments()
        except ConfigurationError:
            raise
        except ReportError as e:
            self.state.fail(ASSIGNMENTS, token, str(e))
            return
        self.state.apply(ASSIGNMENTS, token, assignments)

    def load_candidates(self, assignment):
        token = self.state.begin(CANDIDATES)
        try:
            with self.working():
                candidates = self.service.fetch_candidates(assignment.id)
        except ConfigurationError:
            raise
        except ReportError as e:
            self.state.fail(CANDIDATES, token, str(e))
            return
        self.state.apply(CANDIDATES, token, candidates)

    def print_overview(self):
        stats = overview_stats(self.state.assignments, self.state.candidates)
        self.console.print(
            f"[bold]Assignments:[/bold] {stats.active_assignments} active / {stats.total_assignments} "
            f"({stats.assignment_percent}%)    "
            f"[bold]Candidates:[/bold] {stats.active_candidates} active / {stats.total_candidates} "
            f"({stats.candidate_percent}%)"
        )

    def print_assignments(self, items):
        table = Table(title="Assignments")
        table.add_column("#", justify="right")
        table.add_column("Name")
        table.add_column("Client")
        table.add_column("Status")
        table.add_column("Candidates", justify="right")
        for index, a in enumerate(items, start=1):
            table.add_row(str(index), a.name, a.client.name, a.status, str(a.candidate_count))
        self.console.print(table)

    def print_candidates(self, items):
        table = Table(title=f"Candidates: {self.state.selected_assignment.name}")
        table.add_column("#", justify="right")
        table.add_column("Name")
        table.add_column("Current position")
        table.add_column("Status")
        for index, c in enumerate(items, start=1):
            position = c.current_position
            company = position.get("company")
            company_name = company.get("name", "") if isinstance(company, dict) else (company or "")
            current = " at ".join(part for part in (position.get("title", ""), company_name) if part)
            table.add_row(str(index), c.name, current or "-", c.status)
        self.console.print(table)

    def choose(self, items, label: str, filter_func, printer):
        """
        Number selects an entry, any other text filters the list,
        empty input clears the filter and `q` goes back.
        """
        visible = list(items)
        while True:
            printer(visible)
            answer = Prompt.ask(f"Select {label} by number, type to search, q to go back", default="q")
            answer = answer.strip()
            if answer.lower() == "q":
                return None
            if answer.isdigit():
                index = int(answer) - 1
                if 0 <= index < len(visible):
                    return visible[index]
                self.console.print(f"[red]No {label} with number {answer}.[/red]")
                continue
            visible = filter_func(items, answer)

    def ask_config(self) -> ReportConfig:
        while True:
            config = ReportConfig(
                include_personal=Confirm.ask("Include personal data?", default=True),
                include_experience=Confirm.ask("Include work experience?", default=True),
                include_education=Confirm.ask("Include education?", default=True),
            )
            if config.is_valid:
                return config
            self.console.print("[red]Select at least one section.[/red]")

    def generate(self):
        self.state.config = self.ask_config()
        token = self.state.begin(REPORT)
        try:
            with self.working():
                report = self.service.generate_report(
                    self.state.selected_candidate.id,
                    self.state.selected_assignment.id,
                    self.state.config,
                )
        except ConfigurationError:
            raise
        except ReportError as e:
            self.state.fail(REPORT, token, str(e))
            return
        self.state.apply(REPORT, token, report)

    def export(self):
        report = self.state.report
        choice = Prompt.ask("Export format", choices=list(EXPORT_FORMATS) + ["all", "none"], default="pdf")
        if choice == "none":
            return
        formats = EXPORT_FORMATS if choice == "all" else (choice,)

        exporters = {
            "md": lambda: self.service.export_markdown(report),
            "pdf": lambda: self.service.export_pdf(report, self.state.selected_assignment),
            "docx": lambda: self.service.export_docx(report, self.state.selected_assignment),
            "html": lambda: self.service.export_html(report, self.state.selected_assignment),
        }
        for fmt in formats:
            result = exporters[fmt]()
            if result.success:
                self.console.print(f"[green]Saved {result.file_path}[/green]")
            else:
                self.console.print(f"[red]Export failed: {result.message}[/red]")

    def candidate_loop(self, assignment):
        self.state.select_assignment(assignment)
        self.load_candidates(assignment)
        self.show_error()

        while True:
            candidate = self.choose(self.state.candidates, "candidate", filter_candidates, self.print_candidates)
            if candidate is None:
                return
            self.state.select_candidate(candidate)
            if not Confirm.ask(f"Generate report for {candidate.name}?", default=True):
                continue

            self.generate()
            self.show_error()
            if self.state.report is None:
                continue

            sections = self.state.report.report_sections
            markdown = self.service.assembler.to_markdown(self.state.report.candidate_data, sections)
            self.console.print(Panel(Markdown(markdown), title="Report preview"))
            self.export()

    def run(self):
        while True:
            if not self.ensure_credentials():
                continue
            try:
                self.load_assignments()
                self.show_error()
                self.print_overview()
                assignment = self.choose(self.state.assignments, "assignment", filter_assignments,
                                         self.print_assignments)
                if assignment is None:
                    if Confirm.ask("Quit?", default=True):
                        return
                    continue
                self.candidate_loop(assignment)
            except ConfigurationError as e:
                self.console.print(f"[red]{e}[/red]")
                self.ensure_credentials(force=True)


def main():
    try:
        _main_cli()
    except KeyboardInterrupt:
        # Use stderr so it captures attention even if stdout is redirected or rich
        sys.stderr.write("\n\033[31m[-] Cancelled by user\033[0m\n")
        sys.exit(130)


def _main_cli():
    """
    Parses arguments, configures logging and runs the interactive console.
    """
    parser = argparse.ArgumentParser(description="Candidate report generator for Ezekia")
    parser.add_argument("--output-dir", help="Directory for exported reports (default: user_content/reports)")
    parser.add_argument("--limit", type=int, default=100, help="Maximum number of assignments / candidates to fetch (default: 100)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase output verbosity (-v=WARNING, -vv=INFO, -vvv=DEBUG)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress status output (ERROR only)")
    parser.add_argument("--ca-bundle", help="Path to a custom CA certificate bundle for HTTPS verification (proxy environments)")

    args = parser.parse_args()

    if args.limit < 1:
        parser.error("--limit must be a positive number")

    # Configure custom CA bundle if provided via CLI
    if args.ca_bundle:
        set_ca_bundle_override(args.ca_bundle)

    console = Console()
    status_handler = None

    if args.quiet:
        setup_logging(0, quiet=True)
    elif args.verbose == 0:
        # Default mode: log lines go to the rich status display
        status_handler = StatusLogHandler(console)
        setup_logging(2, custom_handler=status_handler)
    else:
        setup_logging(args.verbose)

    logger.info("--- Candidate Report ---")
    service = ReportService(output_dir=args.output_dir, limit=args.limit)
    ConsoleApp(service, console, status_handler).run()
    logger.info("Done!")


if __name__ == "__main__":
    main()
