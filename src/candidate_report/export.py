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
Writes exported reports to disk.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from candidate_report.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    success: bool
    file_path: Optional[str] = None
    message: Optional[str] = None


def report_filename(candidate_name: str, extension: str) -> str:
    """Each character outside [A-Za-z0-9] becomes an underscore."""
    safe_name = re.sub(r"[^A-Za-z0-9]", "_", candidate_name or "")
    return f"{safe_name}_Report.{extension.lstrip('.')}"


def _target(suggested_name: str, directory: str = None) -> Path:
    output_dir = Path(directory or get_settings().output_dir)
    if not output_dir.exists():
        output_dir.mkdir(parents=True)
        logger.info(f"Created output directory: {output_dir}")
    return output_dir / Path(suggested_name).name


def save_text_file(content: str, suggested_name: str, directory: str = None) -> ExportResult:
    try:
        path = _target(suggested_name, directory)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to save {suggested_name}: {e}")
        return ExportResult(success=False, message=str(e))

    logger.info(f"    > Saved {path}")
    return ExportResult(success=True, file_path=str(path))


def save_binary_file(data: bytes, suggested_name: str, directory: str = None) -> ExportResult:
    try:
        path = _target(suggested_name, directory)
        path.write_bytes(data)
    except OSError as e:
        logger.error(f"Failed to save {suggested_name}: {e}")
        return ExportResult(success=False, message=str(e))

    logger.info(f"    > Saved {path} ({len(data)} bytes)")
    return ExportResult(success=True, file_path=str(path))
