"""Filesystem storage for diary runs, training reports and merged reports."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from nutrition_report.adapters.payloads import DiaryDayPayload, TrainingReportPayload
from nutrition_report.adapters.rendering import (
    diary_csv,
    merged_report_markdown,
    merged_report_payload,
)
from nutrition_report.domain.diary import DiaryDay
from nutrition_report.domain.report import MergedReport
from nutrition_report.domain.training import TrainingWeek
from nutrition_report.errors import PreconditionError

BOM = "\ufeff"
DIARY_PREFIX = "mfp_diary_"

_logger = logging.getLogger(__name__)


def read_json(path: Path) -> object:
    """Read JSON text, ignoring a leading byte-order mark."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise PreconditionError(f"File not found: {path}") from exc
    try:
        return json.loads(text.removeprefix(BOM))
    except json.JSONDecodeError as exc:
        raise PreconditionError(f"Invalid JSON in {path}: {exc}") from exc


def run_timestamp(now: datetime) -> str:
    """Timestamp used in diary output file names."""
    return now.strftime("%Y-%m-%dT%H-%M-%S")


@dataclass
class TrainingReportDirectory:
    """Weekly training reports stored as ``report_<start>_<end>.json``."""

    directory: Path

    def list_report_names(self) -> list[str]:
        """File names of the reports in the directory, sorted."""
        if not self.directory.is_dir():
            return []
        return sorted(
            path.name
            for path in self.directory.iterdir()
            if path.name.startswith("report_") and path.suffix == ".json"
        )

    def load_week(self, name: str) -> TrainingWeek:
        """Load a report by file name, or by path when ``name`` is one."""
        path = Path(name)
        if not path.is_absolute() and path.parent == Path("."):
            path = self.directory / name
        try:
            return TrainingReportPayload.model_validate(read_json(path)).to_domain()
        except ValidationError as exc:
            raise PreconditionError(f"Invalid training report {path}: {exc}") from exc


@dataclass
class DiaryFiles:
    """Diary run outputs under the MFP report directory."""

    directory: Path

    def default_json_path(self, now: datetime) -> Path:
        """Output path for a run started at ``now``."""
        return self.directory / f"{DIARY_PREFIX}{run_timestamp(now)}.json"

    def write_days(self, days: list[DiaryDay], json_path: Path) -> tuple[Path, Path]:
        """Write the JSON and CSV renderings, both prefixed with a BOM."""
        json_path.parent.mkdir(parents=True, exist_ok=True)
        payload = [DiaryDayPayload.from_domain(day).to_json_dict() for day in days]
        json_path.write_text(
            BOM + json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        csv_path = json_path.with_suffix(".csv")
        csv_path.write_text(BOM + diary_csv(days), encoding="utf-8", newline="")
        _logger.info("Diary saved: %s", json_path)
        _logger.info("Diary saved: %s", csv_path)
        return json_path, csv_path

    def read_days(self, path: Path) -> list[DiaryDay]:
        """Read a diary JSON file back into domain records."""
        raw = read_json(path)
        if not isinstance(raw, list):
            raise PreconditionError(f"Diary file {path} must contain a JSON list")
        try:
            return [DiaryDayPayload.model_validate(item).to_domain() for item in raw]
        except ValidationError as exc:
            raise PreconditionError(f"Invalid diary file {path}: {exc}") from exc

    def latest(self) -> Path | None:
        """The lexicographically last diary JSON, if any."""
        if not self.directory.is_dir():
            return None
        candidates = sorted(
            path
            for path in self.directory.iterdir()
            if path.name.startswith(DIARY_PREFIX) and path.suffix == ".json"
        )
        return candidates[-1] if candidates else None


@dataclass
class MergedReportFiles:
    """Merged report outputs under the nutrition report directory."""

    directory: Path

    def write(self, report: MergedReport) -> tuple[Path, Path]:
        """Write the JSON payload and its Markdown rendering."""
        self.directory.mkdir(parents=True, exist_ok=True)
        stem = f"nutri_report_{report.start.isoformat()}_{report.end.isoformat()}"
        json_path = self.directory / f"{stem}.json"
        md_path = self.directory / f"{stem}.md"
        json_path.write_text(
            json.dumps(merged_report_payload(report), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        md_path.write_text(merged_report_markdown(report), encoding="utf-8")
        _logger.info("Nutrition report saved: %s", json_path)
        _logger.info("Nutrition report saved: %s", md_path)
        return json_path, md_path
