"""Multi-path lookup of workbook snapshots, on disk or under a base URL."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from rural_explorer.common.constants import SOURCE_PATH_TEMPLATES
from rural_explorer.common.errors import SourceNotFoundError
from rural_explorer.common.http import HttpClient, HttpRequestError
from rural_explorer.common.logging import log_event


def candidate_paths(name: str, templates: Sequence[str] = SOURCE_PATH_TEMPLATES) -> list[str]:
    return [template.format(name=name) for template in templates]


def locate_local(
    name: str,
    root: Path,
    templates: Sequence[str] = SOURCE_PATH_TEMPLATES,
    logger: logging.Logger | None = None,
) -> Path:
    candidates = candidate_paths(name, templates)
    for relative in candidates:
        path = root / relative
        if logger is not None:
            log_event(logger, f"trying {path}", level=logging.DEBUG, stage="locate", snapshot=name, event="SOURCE_TRY")
        if path.is_file():
            return path
    raise SourceNotFoundError(name, candidates)


def fetch_remote(
    name: str,
    base_url: str,
    client: HttpClient,
    templates: Sequence[str] = SOURCE_PATH_TEMPLATES,
    logger: logging.Logger | None = None,
) -> tuple[bytes, str]:
    candidates = candidate_paths(name, templates)
    base = base_url.rstrip("/")
    for relative in candidates:
        url = f"{base}/{relative}"
        try:
            return client.get_bytes(url), url
        except HttpRequestError as exc:
            # Any failure on one candidate moves on to the next.
            if logger is not None:
                log_event(
                    logger,
                    f"candidate {url} unavailable",
                    level=logging.DEBUG,
                    stage="locate",
                    snapshot=name,
                    event="SOURCE_MISS",
                    status="miss",
                    error_code=exc.error_code,
                )
    raise SourceNotFoundError(name, candidates)
