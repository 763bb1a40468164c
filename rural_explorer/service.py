"""Load orchestration: locate, read, normalise, summarise, commit."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from rural_explorer.common.config_loader import DashboardConfig
from rural_explorer.common.errors import PipelineError, SourceError
from rural_explorer.common.http import HttpClient
from rural_explorer.common.logging import log_event
from rural_explorer.common.models import HeaderMap, Placeholders
from rural_explorer.pipeline.aggregate import AreaPolicy, summarise
from rural_explorer.pipeline.normalise import normalise_rows
from rural_explorer.pipeline.view_model import build_view_model
from rural_explorer.source.locate import fetch_remote, locate_local
from rural_explorer.source.workbook import read_rows
from rural_explorer.state import DashboardState, Lifecycle, Snapshot


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def load_snapshot(
    name: str,
    state: DashboardState,
    config: DashboardConfig,
    logger: logging.Logger,
    *,
    data_dir: Path,
    client: HttpClient | None = None,
    base_url: str | None = None,
    area_policy: AreaPolicy | None = None,
) -> Snapshot:
    ticket = state.begin_load(name)
    started = time.monotonic()
    templates = config.source["path_templates"]
    log_event(logger, f"loading {name}", stage="load", snapshot=name, event="LOAD_START", status="ok")

    try:
        if base_url:
            if client is None:
                raise SourceError("A base URL needs an HTTP client")
            payload, location = fetch_remote(name, base_url, client, templates, logger=logger)
            rows = read_rows(payload)
        else:
            path = locate_local(name, data_dir, templates, logger=logger)
            location = str(path)
            rows = read_rows(path)
        log_event(
            logger,
            f"found {name} at {location}",
            stage="locate",
            snapshot=name,
            event="SOURCE_FOUND",
            status="ok",
        )
        log_event(logger, "rows parsed", stage="read", snapshot=name, event="ROWS_PARSED", status="ok", rows_in=len(rows))
        if rows:
            logger.debug("columns: %s", ", ".join(rows[0]))

        result = normalise_rows(
            rows,
            header_map=HeaderMap.from_mapping(config.headers),
            placeholders=Placeholders.from_mapping(config.placeholders),
            logger=logger,
        )
        log_event(
            logger,
            f"{len(result.records)} valid properties",
            stage="normalise",
            snapshot=name,
            event="ROWS_NORMALISED",
            status="ok",
            rows_in=result.raw_row_count,
            rows_out=len(result.records),
        )

        policy = AreaPolicy(area_policy or config.aggregation["area_policy"])
        summary = summarise(result.records, top_n=int(config.aggregation["top_n"]), area_policy=policy)
        snapshot = state.commit(ticket, result.records, summary)
    except PipelineError as exc:
        log_event(
            logger,
            f"load failed: {exc}",
            level=logging.ERROR,
            stage="load",
            snapshot=name,
            event="LOAD_FAIL",
            status="error",
            duration_ms=_elapsed_ms(started),
            error_code=exc.error_code,
        )
        raise

    duration_ms = _elapsed_ms(started)
    if duration_ms > float(config.source["watchdog_seconds"]) * 1000:
        log_event(
            logger,
            f"load of {name} exceeded {config.source['watchdog_seconds']} s",
            level=logging.WARNING,
            stage="load",
            snapshot=name,
            event="LOAD_SLOW",
            status="slow",
            duration_ms=duration_ms,
        )
    log_event(
        logger,
        f"loaded {snapshot.summary.record_count} properties",
        stage="load",
        snapshot=name,
        event="LOAD_END",
        status="ok",
        duration_ms=duration_ms,
        rows_out=snapshot.summary.record_count,
    )
    return snapshot


class Dashboard:
    """Owns the dashboard state and its source collaborator."""

    def __init__(
        self,
        config: DashboardConfig,
        logger: logging.Logger,
        *,
        data_dir: Path,
        base_url: str | None = None,
        area_policy: AreaPolicy | None = None,
        client_factory: Callable[[], HttpClient] | None = None,
    ) -> None:
        self.config = config
        self.logger = logger
        self.data_dir = data_dir
        self.base_url = base_url
        self.area_policy = area_policy
        self.client_factory = client_factory or (lambda: HttpClient.from_config(config.http))
        self.state = DashboardState()
        self.source = Lifecycle("source")

    def _open_source(self) -> HttpClient | None:
        if self.base_url:
            return self.client_factory()
        if not self.data_dir.is_dir():
            raise SourceError(f"Data directory does not exist: {self.data_dir}")
        return None

    def start(self) -> None:
        self.source.initialise(self._open_source)
        log_event(self.logger, "source ready", stage="start", event="SOURCE_READY", status="ok", attempt=self.source.attempts)

    def load(self, name: str | None = None) -> Snapshot:
        if not self.source.ready:
            self.start()
        snapshot_name = name or self.config.source["default_snapshot"]
        return load_snapshot(
            snapshot_name,
            self.state,
            self.config,
            self.logger,
            data_dir=self.data_dir,
            client=self.source.resource,
            base_url=self.base_url,
            area_policy=self.area_policy,
        )

    def view_model(self) -> dict | None:
        snapshot = self.state.current
        if snapshot is None:
            return None
        return build_view_model(
            snapshot.records,
            snapshot.summary,
            highlight_score=int(self.config.aggregation["highlight_score"]),
        )

    def close(self) -> None:
        client = self.source.resource
        if client is not None:
            client.close()
        self.source.reset()
