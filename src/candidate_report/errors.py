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
Exceptions raised while fetching candidate data and building reports.
"""


class ReportError(Exception):
    """Base class for all errors surfaced to the user."""


class ConfigurationError(ReportError):
    """An API key is missing or the report configuration is unusable."""


class EzekiaError(ReportError):
    """The Ezekia gateway reported a transport or remote error."""


class NarrativeError(ReportError):
    """The completion provider failed to produce report text."""
