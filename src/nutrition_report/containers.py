"""Dependency container wiring for the application."""

from dataclasses import dataclass
from pathlib import Path

from nutrition_report.adapters.browser import PageProvider
from nutrition_report.adapters.report_files import (
    DiaryFiles,
    MergedReportFiles,
    TrainingReportDirectory,
)
from nutrition_report.config import Settings
from nutrition_report.services.challenge import (
    ChallengeResolver,
    Escalation,
    RetryPolicy,
)
from nutrition_report.services.merger import TrainingMerger
from nutrition_report.services.walker import DateRangeWalker, DiaryFetcher


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    resolver: ChallengeResolver
    diary_files: DiaryFiles
    training_reports: TrainingReportDirectory
    merged_report_files: MergedReportFiles
    merger: TrainingMerger

    def diary_fetcher(
        self, pages: PageProvider, username: str, save_html: Path | None = None
    ) -> DiaryFetcher:
        """Fetcher bound to a live page provider."""
        return DiaryFetcher(
            pages=pages,
            resolver=self.resolver,
            base_url=self.settings.mfp_base_url,
            username=username,
            locale=self.settings.mfp_locale,
            include_exercise=self.settings.extract_exercise,
            settle_seconds=self.settings.settle_seconds,
            save_html=save_html,
        )

    def walker(self, fetcher: DiaryFetcher) -> DateRangeWalker:
        """Walker pacing requests by the configured delay."""
        return DateRangeWalker(
            operation=fetcher.fetch, pacing_seconds=self.settings.pacing_seconds
        )


def build_container(
    settings: Settings | None = None, escalate: Escalation | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolver = ChallengeResolver(
        password=resolved_settings.mfp_diary_password,
        policy=RetryPolicy(
            max_attempts=resolved_settings.challenge_max_attempts,
            interval_seconds=resolved_settings.challenge_poll_seconds,
        ),
        escalate=escalate,
    )
    training_reports = TrainingReportDirectory(Path(resolved_settings.intervals_dir))
    return AppContainer(
        settings=resolved_settings,
        resolver=resolver,
        diary_files=DiaryFiles(Path(resolved_settings.mfp_dir)),
        training_reports=training_reports,
        merged_report_files=MergedReportFiles(Path(resolved_settings.nutri_dir)),
        merger=TrainingMerger(training_reports),
    )
