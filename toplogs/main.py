from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from toplogs.config import ConfigError, ReportConfig
from toplogs.models.data_models import LogFormat
from toplogs.services.aggregator import StatCollector
from toplogs.services.parser import LogParser
from toplogs.services.storage import LogStore

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
# Config
# ──────────────────────────────────────────────────────────────────────────────

API_PREFIX = "/api"

# ──────────────────────────────────────────────────────────────────────────────
# App
# ──────────────────────────────────────────────────────────────────────────────

app = FastAPI(title="top-logs (Upload Access Logs → Summary Report)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

parser = LogParser()

# ──────────────────────────────────────────────────────────────────────────────
# Health
# ──────────────────────────────────────────────────────────────────────────────


@app.get(f"{API_PREFIX}/health")
def health() -> Dict[str, Any]:
    return {"status": "ok", "formats": [f.value for f in LogFormat]}


# ──────────────────────────────────────────────────────────────────────────────
# Report
# ──────────────────────────────────────────────────────────────────────────────


@app.post(f"{API_PREFIX}/report")
def report(
    file: UploadFile = File(...),
    format: LogFormat = Query(...),
    top: Optional[int] = Query(None),
    min_response_time_threshold: Optional[int] = Query(None),
    ignore_parse_errors: Optional[bool] = Query(None),
) -> Dict[str, Any]:
    """
    Summarize one uploaded access log.

    Each upload is a separate run; nothing is kept between requests.
    """
    try:
        config = ReportConfig.from_env(
            max_results=top,
            min_response_time_threshold=min_response_time_threshold,
            ignore_parse_errors=ignore_parse_errors,
        )
    except ConfigError as err:
        raise HTTPException(status_code=400, detail=str(err))

    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")

    collector = StatCollector(config)
    collector.process_lines(
        LogStore.from_bytes(content, name=file.filename or "<upload>").read_lines(),
        format,
        parser,
    )
    logger.info(
        "report for %s: %d requests, %d errors",
        file.filename,
        collector.total_requests,
        collector.errors,
    )
    return collector.summarize().to_dict()
