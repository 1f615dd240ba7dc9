from __future__ import annotations

import logging
from contextlib import ExitStack
from datetime import UTC, datetime

from ..config.loader import RetrieverConfig, load_reward_tables, load_sources
from ..excel.reader import HeaderNotFoundError, SheetReadError
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ColumnLayout, SourceDescriptor
from ..models.error_record import ErrorRecord
from ..models.pharmacy import PharmacyRecord
from ..models.processing_result import RunResult, SpreadsheetStat
from .enrichment import enrich_records
from .extractor import extract_pharmacies
from .fetch import FetchError, SourceFetcher
from .geocode import GeocodeResolver, GeocodeUnresolvedError
from .output import OutputError, write_records
from .reward import RewardTableNotFoundError

"""Service orchestration for the pharmacy list retriever.

Coordinates one run: load configuration, fetch and extract every spreadsheet
in source order, enrich the records, write the JSON output. Any failure aborts
the run and nothing is written.
"""

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal error that aborts the run."""
    pass


def collect_records(
    sources: list[SourceDescriptor],
    fetcher: SourceFetcher,
    layout: ColumnLayout,
    error_log: ErrorLogBuffer,
) -> tuple[list[PharmacyRecord], list[SpreadsheetStat]]:
    """Fetch and extract every spreadsheet of every source, in order."""
    logger.info("retrieving spreadsheets and pharmacy records...")
    records: list[PharmacyRecord] = []
    stats: list[SpreadsheetStat] = []
    for source in sources:
        for url in source.excel_urls:
            logger.info(f"  URL: {url}")
            try:
                streams = fetcher.fetch(url)
            except FetchError as e:
                error_log.append(ErrorRecord.create(source.department, url, "", "FETCH_ERROR", str(e)))
                raise ProcessingError(f"failed to get spreadsheet: {e}") from e
            for stream in streams:
                try:
                    extracted = extract_pharmacies(stream.data, source, layout)
                except (SheetReadError, HeaderNotFoundError) as e:
                    error_type = "HEADER_NOT_FOUND" if isinstance(e, HeaderNotFoundError) else "SHEET_READ_ERROR"
                    error_log.append(ErrorRecord.create(source.department, stream.name, "", error_type, str(e)))
                    raise ProcessingError(f"failed to extract pharmacy info from {stream.name}: {e}") from e
                logger.info(f"    {stream.name}: {len(extracted)} pharmacies")
                stats.append(SpreadsheetStat(department=source.department, name=stream.name, records=len(extracted)))
                records.extend(extracted)
    logger.info(f"total {len(records)} pharmacies")
    return records, stats


def run_pipeline(
    config: RetrieverConfig,
    *,
    fetcher: SourceFetcher | None = None,
    resolver: GeocodeResolver | None = None,
    layout: ColumnLayout | None = None,
    best_effort: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Run one retrieval end to end.

    Fetcher and resolver created here are closed when the run ends; injected
    ones are left to the caller.

    Raises:
        ConfigError: source list or reward tables missing/invalid
        ProcessingError: any fatal failure after configuration was loaded
    """
    start_time = datetime.now(UTC)
    layout = layout or ColumnLayout()
    error_log = error_log if error_log is not None else ErrorLogBuffer()

    sources = load_sources(config.sources_path)
    tables = load_reward_tables(config.reward_path)
    logger.debug(f"{len(sources)} sources, {len(tables)} reward tables loaded")

    with ExitStack() as stack:
        if fetcher is None:
            fetcher = stack.enter_context(SourceFetcher(timeout=config.http_timeout))
        if resolver is None:
            resolver = stack.enter_context(
                GeocodeResolver(
                    config.geocode_url,
                    retry=config.geocode_retry,
                    backoff=config.geocode_backoff,
                    timeout=config.http_timeout,
                )
            )
        try:
            records, stats = collect_records(sources, fetcher, layout, error_log)

            logger.info("retrieving coordinates and reward points...")
            try:
                enriched = enrich_records(records, tables, resolver, best_effort=best_effort, error_log=error_log)
            except (GeocodeUnresolvedError, RewardTableNotFoundError) as e:
                error_type = "GEOCODE_UNRESOLVED" if isinstance(e, GeocodeUnresolvedError) else "REWARD_TABLE_NOT_FOUND"
                error_log.append(ErrorRecord.create("", "", "", error_type, str(e)))
                raise ProcessingError(f"failed to enrich pharmacy info: {e}") from e

            try:
                output_path = write_records(enriched, config.output_path)
            except OutputError as e:
                raise ProcessingError(str(e)) from e
            logger.info(f"wrote {len(enriched)} pharmacies to {output_path}")
        finally:
            flushed = error_log.flush()
            if flushed is not None:
                logger.info(f"error log: {flushed}")

    end_time = datetime.now(UTC)
    return RunResult(
        sources=len(sources),
        spreadsheets=len(stats),
        records=len(enriched),
        geocode_attempts=resolver.total_attempts,
        skipped_records=len(records) - len(enriched),
        output_path=output_path,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        spreadsheet_stats=stats,
    )
