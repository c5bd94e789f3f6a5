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
from unittest.mock import MagicMock, patch

import openai

from candidate_report import llm_client
from candidate_report.errors import ConfigurationError, NarrativeError
from candidate_report.models import CandidateRecord, EducationEntry, ExperienceEntry, PersonalData


def _record():
    return CandidateRecord(
        personal_data=PersonalData(name="Anna Berg", age=44, nationality="Deutsch",
                                   languages={"Deutsch": "Muttersprache", "Englisch": "fließend"}),
        experience=[
            ExperienceEntry(years="2021-01-01 - Present", title="CFO", company="Acme AG",
                            description="Verantwortlich für Finanzen"),
            ExperienceEntry(years="2015-01-01 - 2020-12-31", title="Controller", company="Beta GmbH"),
        ],
        education=[EducationEntry(years="2005 - 2010", degree="MSc", field="BWL", institution="LMU")],
    )


def _completion(text):
    message = MagicMock()
    message.content = text
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


class TestSplitSections(unittest.TestCase):
    def test_both_headings(self):
        sections = llm_client.split_sections("PERSÖNLICHKEIT\nfoo\nZUSAMMENFASSUNG\nbar")
        self.assertEqual(sections.personality_section, "foo")
        self.assertEqual(sections.summary_section, "bar")

    def test_custom_headings(self):
        sections = llm_client.split_sections("PERSONALITY\nfoo\nSUMMARY\nbar",
                                             first="PERSONALITY", second="SUMMARY")
        self.assertEqual((sections.personality_section, sections.summary_section), ("foo", "bar"))

    def test_only_first_heading(self):
        sections = llm_client.split_sections("PERSÖNLICHKEIT\nfoo")
        self.assertEqual(sections.personality_section, "foo")
        self.assertEqual(sections.summary_section, "")

    def test_neither_heading(self):
        sections = llm_client.split_sections("Just some text")
        self.assertEqual(sections.personality_section, "")
        self.assertEqual(sections.summary_section, "")

    def test_heading_markup_is_removed(self):
        text = "1. **PERSÖNLICHKEIT**\n\nErster Absatz.\n\nZweiter Absatz.\n\n2. **ZUSAMMENFASSUNG**:\nFazit."
        sections = llm_client.split_sections(text)
        self.assertEqual(sections.personality_section, "Erster Absatz.\n\nZweiter Absatz.")
        self.assertEqual(sections.summary_section, "Fazit.")

    def test_markdown_headings(self):
        sections = llm_client.split_sections("## PERSÖNLICHKEIT\nfoo\n\n## ZUSAMMENFASSUNG\nbar\n")
        self.assertEqual((sections.personality_section, sections.summary_section), ("foo", "bar"))

    def test_control_characters_are_removed(self):
        sections = llm_client.split_sections("PERSÖNLICHKEIT\nfoo\x0bbaz\x01\nZUSAMMENFASSUNG\nbar")
        self.assertEqual(sections.personality_section, "foo\nbaz")


class TestBuildPrompt(unittest.TestCase):
    def test_prompt_contents(self):
        prompt = llm_client.LLMClient("sk-test", model="gpt-test").build_prompt(_record())
        self.assertIn("Name: Anna Berg", prompt)
        self.assertIn("Current Position: CFO at Acme AG", prompt)
        self.assertIn("Age: 44", prompt)
        self.assertIn("Languages: Deutsch (Muttersprache), Englisch (fließend)", prompt)
        self.assertIn("- 2015-01-01 - 2020-12-31: Controller at Beta GmbH", prompt)
        self.assertIn("- 2005 - 2010: MSc in BWL at LMU", prompt)
        self.assertIn("PERSÖNLICHKEIT", prompt)
        self.assertIn("ZUSAMMENFASSUNG", prompt)

    def test_missing_values_are_na(self):
        prompt = llm_client.LLMClient("sk-test", model="gpt-test").build_prompt(CandidateRecord())
        self.assertIn("Name: N/A", prompt)
        self.assertIn("Current Position: N/A", prompt)
        self.assertIn("Age: N/A", prompt)
        self.assertIn("Nationality: N/A", prompt)


class TestRequestCompletion(unittest.TestCase):
    @patch("candidate_report.llm_client.openai.OpenAI")
    def test_single_completion_call(self, mock_openai):
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _completion("PERSÖNLICHKEIT\nfoo\nZUSAMMENFASSUNG\nbar")
        mock_openai.return_value = mock_client

        client = llm_client.LLMClient("sk-test", model="gpt-test")
        sections = client.generate_report_sections(_record())

        self.assertEqual(sections.personality_section, "foo")
        self.assertEqual(sections.summary_section, "bar")
        mock_openai.assert_called_once_with(api_key="sk-test")
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-test")
        self.assertEqual(kwargs["temperature"], 0.7)
        self.assertEqual(kwargs["max_tokens"], 1500)
        self.assertEqual(kwargs["messages"][0]["role"], "system")
        self.assertIn("Anna Berg", kwargs["messages"][1]["content"])

    def test_missing_key(self):
        with self.assertRaises(ConfigurationError):
            llm_client.LLMClient("", model="gpt-test").request_completion("prompt")

    @patch("candidate_report.llm_client.openai.OpenAI")
    def test_provider_error(self, mock_openai):
        mock_openai.return_value.chat.completions.create.side_effect = openai.OpenAIError("quota exceeded")

        with self.assertRaises(NarrativeError) as ctx:
            llm_client.LLMClient("sk-test", model="gpt-test").request_completion("prompt")
        self.assertEqual(str(ctx.exception), "quota exceeded")

    @patch("candidate_report.llm_client.openai.OpenAI")
    def test_empty_choices(self, mock_openai):
        response = MagicMock()
        response.choices = []
        mock_openai.return_value.chat.completions.create.return_value = response

        with self.assertRaises(NarrativeError) as ctx:
            llm_client.LLMClient("sk-test", model="gpt-test").request_completion("prompt")
        self.assertEqual(str(ctx.exception), "Failed to generate report text")


if __name__ == '__main__':
    unittest.main()
