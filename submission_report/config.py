"""Global configuration constants for the project.

Defines paths, platform endpoints and report labels used across the
pipeline and the command-line entrypoint.
"""

from __future__ import annotations

from pathlib import Path

# Project directories
PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
LOG_DIR: Path = PROJECT_ROOT / "logs"
DEFAULT_OUTPUT_DIR: Path = PROJECT_ROOT / "output"

# Platform API defaults
DEFAULT_BASE_URL: str = "https://cms.uobmydigitalspace.com"
PLATFORM_HOST_PREFIX: str = "https://cms.uobmydigitalspace.com"
USER_GROUP_PATH: str = "/api/v3/user-group/group/undefined/users"
USER_SUBMISSION_PATH: str = "/api/v3/exam/user-submission/list"
DEFAULT_TENANT: str = "uob"
DEFAULT_COUNTRY: str = "id"
DEFAULT_PLATFORM: str = "Web"
USER_GROUP_STATUS: str = "USER_GROUP_ACTIVE_BY_PERIOD_FILTER"

# Request shaping
PAGE_SIZE: int = 50
# Keeps the repeated userSerials query under the server's URL length limit.
CHUNK_SIZE: int = 18
DEFAULT_REQUEST_TIMEOUT: int = 30
DEFAULT_TARGET_RPM: int = 120

# Join / aggregation defaults
UNKNOWN_STUDENT_NAME: str = "Unknown Student"

# Report rendering
REPORT_TITLE: str = "UOB Assignment Submissions Report"
REPORT_FILENAME_FORMAT: str = "uob-submissions-{date}.html"
LINK_ATTACHMENT_TYPE: str = "SUBMISSION_TYPE_LINK"
DEFAULT_ATTACHMENT_LABEL: str = "File"
NAME_FALLBACK: str = "—"
PREVIEW_ROW_LIMIT: int = 5
PREVIEW_FEEDBACK_LENGTH: int = 60
TIMESTAMP_DISPLAY_FORMAT: str = "%d %b %Y, %H:%M"

# CLI defaults and logging
LOG_FILENAME_REPORT: str = "submission_report.log"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
