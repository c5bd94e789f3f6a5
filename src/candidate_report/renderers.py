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
Lays out a ReportDocument as PDF (reportlab), DOCX (python-docx) or HTML (jinja2).

The renderers only decide presentation. Every piece of text they print comes
from the ReportDocument built by generator.ReportAssembler.
"""

import logging
from io import BytesIO
from xml.sax.saxutils import escape

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor
from jinja2 import Environment
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from candidate_report.generator import (
    EducationBlock,
    ExperienceBlock,
    Heading,
    InfoTable,
    ReportDocument,
    TextBlock,
)

logger = logging.getLogger(__name__)

ACCENT = "#1F3864"


def _markup(text: str) -> str:
    """Escapes text for a reportlab Paragraph, keeping line breaks."""
    return escape(text or "").replace("\n", "<br/>")


class PdfRenderer:
    """A4 PDF, 20 mm margins, one physical page break per logical page."""

    def __init__(self):
        base = getSampleStyleSheet()
        self.styles = {
            "body": ParagraphStyle("ReportBody", parent=base["Normal"], fontSize=10, leading=14),
            "narrative": ParagraphStyle("ReportNarrative", parent=base["Normal"], fontSize=10,
                                        leading=14, alignment=TA_JUSTIFY, spaceAfter=8),
            "small": ParagraphStyle("ReportSmall", parent=base["Normal"], fontSize=8, leading=10),
            "header": ParagraphStyle("ReportHeader", parent=base["Normal"], fontSize=8,
                                     textColor=colors.grey, alignment=TA_RIGHT, spaceAfter=12),
            "h2": ParagraphStyle("ReportH2", parent=base["Heading2"], textColor=colors.HexColor(ACCENT)),
            "h3": ParagraphStyle("ReportH3", parent=base["Heading3"], textColor=colors.HexColor(ACCENT)),
            "title": ParagraphStyle("ReportTitle", parent=base["Title"], textColor=colors.HexColor(ACCENT),
                                    spaceBefore=40 * mm),
            "center": ParagraphStyle("ReportCenter", parent=base["Normal"], fontSize=12, leading=18,
                                     alignment=TA_CENTER),
            "letterhead": ParagraphStyle("ReportLetterhead", parent=base["Normal"], fontSize=8,
                                         leading=10, alignment=TA_RIGHT),
        }

    def render(self, document: ReportDocument) -> bytes:
        buffer = BytesIO()
        pdf = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=document.title,
        )

        story = self._cover(document)
        for page in document.pages:
            story.append(PageBreak())
            story.append(Paragraph(_markup(page.header), self.styles["header"]))
            for block in page.blocks:
                story.extend(self._block(block))

        pdf.build(story)
        data = buffer.getvalue()
        logger.debug(f"    > PDF rendered ({len(data)} bytes)")
        return data

    def _cover(self, document: ReportDocument) -> list:
        cover = document.cover
        story = [Paragraph(_markup("\n".join(cover.letterhead)), self.styles["letterhead"]),
                 Paragraph(_markup(cover.tagline), self.styles["letterhead"]),
                 Paragraph(_markup(cover.title), self.styles["title"])]

        for line in (cover.candidate_name, cover.client_name, cover.position, cover.location):
            story.append(Paragraph(_markup(line), self.styles["center"]))

        story.append(Spacer(1, 20 * mm))
        story.append(Paragraph(_markup("Präsentiert von:"), self.styles["center"]))
        story.append(Paragraph(_markup(cover.presenter), self.styles["center"]))
        story.append(Paragraph(_markup(cover.date_text), self.styles["center"]))
        story.append(Spacer(1, 30 * mm))
        story.append(Paragraph("<b>Vertraulichkeitsklausel</b>", self.styles["small"]))
        story.append(Paragraph(_markup(cover.confidentiality), self.styles["small"]))
        return story

    def _block(self, block) -> list:
        body = self.styles["body"]

        if isinstance(block, Heading):
            style = self.styles["h2"] if block.level <= 2 else self.styles["h3"]
            return [Paragraph(_markup(block.text), style)]

        if isinstance(block, InfoTable):
            rows = [[Paragraph(f"<b>{_markup(r.label)}</b>", body), Paragraph(_markup(r.value), body)]
                    for r in block.rows]
            table = Table(rows, colWidths=[55 * mm, 115 * mm])
            table.setStyle(TableStyle([
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ]))
            return [table, Spacer(1, 6 * mm)]

        if isinstance(block, ExperienceBlock):
            return [
                Paragraph(f"<b>{_markup(block.years)}</b>", body),
                Paragraph(_markup(block.company_line), body),
                Paragraph(f"<i>{_markup(block.title)}</i>", body),
                Paragraph(_markup(block.description), body),
                Spacer(1, 4 * mm),
            ]

        if isinstance(block, EducationBlock):
            flowables = [
                Paragraph(f"<b>{_markup(block.years)}</b>", body),
                Paragraph(_markup(block.degree_line), body),
                Paragraph(f"Universität / Bildungseinrichtung: {_markup(block.institution)}", body),
                Paragraph(f"Studiengang: {_markup(block.field)}", body),
                Paragraph(f"Beschreibung: {_markup(block.description)}", body),
            ]
            if block.further_training:
                flowables.append(Paragraph("<b>Weiterbildung:</b>", body))
                flowables.extend(Paragraph(_markup(line), body) for line in block.further_training)
            flowables.append(Spacer(1, 4 * mm))
            return flowables

        if isinstance(block, TextBlock):
            flowables = [Paragraph(_markup(block.title), self.styles["h3"])] if block.title else []
            flowables.extend(Paragraph(_markup(p), self.styles["narrative"]) for p in block.paragraphs)
            return flowables

        raise TypeError(f"Unsupported block type: {type(block).__name__}")


class DocxRenderer:
    """Word document with a page break between logical pages."""

    def render(self, document: ReportDocument) -> bytes:
        self.document = Document()
        self._setup_styles()

        self._cover(document)
        for page in document.pages:
            self.document.add_page_break()
            header = self.document.add_paragraph(page.header)
            header.alignment = WD_ALIGN_PARAGRAPH.RIGHT
            if header.runs:
                header.runs[0].font.size = Pt(8)
                header.runs[0].font.color.rgb = RGBColor(0x80, 0x80, 0x80)
            for block in page.blocks:
                self._block(block)

        buffer = BytesIO()
        self.document.save(buffer)
        data = buffer.getvalue()
        logger.debug(f"    > DOCX rendered ({len(data)} bytes)")
        return data

    def _setup_styles(self):
        font = self.document.styles['Normal'].font
        font.name = 'Calibri'
        font.size = Pt(10)

    def _cover(self, document: ReportDocument):
        cover = document.cover
        letterhead = self.document.add_paragraph("\n".join(cover.letterhead + [cover.tagline]))
        letterhead.alignment = WD_ALIGN_PARAGRAPH.RIGHT

        title = self.document.add_paragraph()
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = title.add_run(cover.title)
        run.bold = True
        run.font.size = Pt(24)

        for line in (cover.candidate_name, cover.client_name, cover.position, cover.location,
                     "Präsentiert von:", cover.presenter, cover.date_text):
            p = self.document.add_paragraph(line)
            p.alignment = WD_ALIGN_PARAGRAPH.CENTER

        self.document.add_paragraph()  # Spacer
        p = self.document.add_paragraph()
        p.add_run("Vertraulichkeitsklausel").bold = True
        clause = self.document.add_paragraph(cover.confidentiality)
        clause.runs[0].font.size = Pt(8)

    def _block(self, block):
        if isinstance(block, Heading):
            self.document.add_heading(block.text, level=block.level)

        elif isinstance(block, InfoTable):
            table = self.document.add_table(rows=0, cols=2)
            for row in block.rows:
                cells = table.add_row().cells
                cells[0].paragraphs[0].add_run(row.label).bold = True
                cells[1].text = row.value
            self.document.add_paragraph()  # Spacer

        elif isinstance(block, ExperienceBlock):
            p = self.document.add_paragraph()
            p.add_run(block.years).bold = True
            p.paragraph_format.keep_with_next = True
            self.document.add_paragraph(block.company_line).paragraph_format.keep_with_next = True
            p = self.document.add_paragraph()
            p.add_run(block.title).italic = True
            if block.description:
                self.document.add_paragraph(block.description)

        elif isinstance(block, EducationBlock):
            p = self.document.add_paragraph()
            p.add_run(block.years).bold = True
            p.paragraph_format.keep_with_next = True
            self.document.add_paragraph(block.degree_line)
            self.document.add_paragraph(f"Universität / Bildungseinrichtung: {block.institution}")
            self.document.add_paragraph(f"Studiengang: {block.field}")
            self.document.add_paragraph(f"Beschreibung: {block.description}")
            if block.further_training:
                self.document.add_paragraph().add_run("Weiterbildung:").bold = True
                for line in block.further_training:
                    self.document.add_paragraph(line)

        elif isinstance(block, TextBlock):
            if block.title:
                self.document.add_heading(block.title, level=3)
            for paragraph in block.paragraphs:
                p = self.document.add_paragraph(paragraph)
                p.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY
                p.paragraph_format.widow_control = True

        else:
            raise TypeError(f"Unsupported block type: {type(block).__name__}")


HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="de">
<head>
<meta charset="utf-8">
<title>{{ document.title }}</title>
<style>
  body { font-family: Helvetica, Arial, sans-serif; font-size: 10pt; color: #222; }
  .page { width: 170mm; margin: 0 auto; padding: 20mm 0; page-break-after: always; }
  .page:last-child { page-break-after: auto; }
  .running-header { text-align: right; font-size: 8pt; color: #888; }
  .letterhead { text-align: right; font-size: 8pt; white-space: pre-line; }
  .cover { text-align: center; }
  h1, h2, h3 { color: {{ accent }}; }
  table.info { width: 100%; border-collapse: collapse; margin-bottom: 6mm; }
  table.info td { vertical-align: top; padding: 2px 4px; border-bottom: 1px solid #ddd; white-space: pre-line; }
  table.info td.label { width: 55mm; font-weight: bold; }
  .entry { margin-bottom: 4mm; white-space: pre-line; }
  .clause { font-size: 8pt; text-align: left; margin-top: 30mm; }
  p.narrative { text-align: justify; }
</style>
</head>
<body>
<section class="page cover">
  <div class="letterhead">{{ document.cover.letterhead | join('\\n') }}
{{ document.cover.tagline }}</div>
  <h1>{{ document.cover.title }}</h1>
  <p>{{ document.cover.candidate_name }}</p>
  <p>{{ document.cover.client_name }}</p>
  <p>{{ document.cover.position }}</p>
  <p>{{ document.cover.location }}</p>
  <p>Präsentiert von:<br>{{ document.cover.presenter }}</p>
  <p>{{ document.cover.date_text }}</p>
  <div class="clause"><strong>Vertraulichkeitsklausel</strong><br>{{ document.cover.confidentiality }}</div>
</section>
{% for page in pages %}
<section class="page {{ page.kind }}">
  <div class="running-header">{{ page.header }}</div>
  {% for kind, block in page.blocks %}
  {% if kind == 'Heading' %}
  <h{{ block.level }}>{{ block.text }}</h{{ block.level }}>
  {% elif kind == 'InfoTable' %}
  <table class="info">
    {% for row in block.rows %}
    <tr><td class="label">{{ row.label }}</td><td>{{ row.value }}</td></tr>
    {% endfor %}
  </table>
  {% elif kind == 'ExperienceBlock' %}
  <div class="entry">
    <strong>{{ block.years }}</strong><br>
    {{ block.company_line }}<br>
    <em>{{ block.title }}</em><br>
    {{ block.description }}
  </div>
  {% elif kind == 'EducationBlock' %}
  <div class="entry">
    <strong>{{ block.years }}</strong><br>
    {{ block.degree_line }}<br>
    Universität / Bildungseinrichtung: {{ block.institution }}<br>
    Studiengang: {{ block.field }}<br>
    Beschreibung: {{ block.description }}
    {% if block.further_training %}
    <br><strong>Weiterbildung:</strong>
    {% for line in block.further_training %}<br>{{ line }}{% endfor %}
    {% endif %}
  </div>
  {% elif kind == 'TextBlock' %}
  {% if block.title %}<h3>{{ block.title }}</h3>{% endif %}
  {% for paragraph in block.paragraphs %}
  <p class="narrative">{{ paragraph }}</p>
  {% endfor %}
  {% endif %}
  {% endfor %}
</section>
{% endfor %}
</body>
</html>
"""


class HtmlRenderer:
    """Standalone HTML page with print page breaks. All values are autoescaped."""

    def __init__(self, template: str = HTML_TEMPLATE):
        self.environment = Environment(autoescape=True)
        self.template = self.environment.from_string(template)

    def render(self, document: ReportDocument) -> str:
        pages = [
            {
                "kind": page.kind,
                "header": page.header,
                "blocks": [(type(block).__name__, block) for block in page.blocks],
            }
            for page in document.pages
        ]
        return self.template.render(document=document, pages=pages, accent=ACCENT)
