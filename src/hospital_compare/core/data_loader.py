from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from hospital_compare.config import (
    DOWNLOAD_TIMEOUT_SECONDS,
    NA_TOKEN,
    default_source,
)

logger = logging.getLogger(__name__)


class DataLoaderError(Exception):
    """Raised when the outcome-of-care file can't be read or downloaded."""


def _build_retry_session() -> requests.Session:
    """
    Build a requests Session with conservative retries.
    The HHS download endpoints can be slow or transiently flaky.
    """
    session = requests.Session()

    retry = Retry(
        total=5,
        connect=5,
        read=5,
        status=5,
        backoff_factor=0.6,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry, pool_connections=4, pool_maxsize=4)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


_SESSION: Optional[requests.Session] = None


def _get_session() -> requests.Session:
    global _SESSION
    if _SESSION is None:
        _SESSION = _build_retry_session()
    return _SESSION


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def _download_csv_text(url: str, timeout_seconds: int) -> str:
    try:
        resp = _get_session().get(url, timeout=timeout_seconds)
    except requests.RequestException as exc:
        raise DataLoaderError(f"HTTP error while downloading {url}: {exc}") from exc

    if resp.status_code != 200:
        preview = (resp.text or "")[:200]
        raise DataLoaderError(
            f"Download of {url} failed with status={resp.status_code}. Preview: {preview}"
        )

    return resp.text


def _read_csv(buffer: Union[str, Path, io.StringIO], na_token: str) -> pd.DataFrame:
    # Everything is read as text: ZIP codes and provider numbers must keep
    # their leading zeros, and rates are coerced later by the table builder.
    # Only the sentinel counts as missing (no "NA"/"" defaults).
    return pd.read_csv(
        buffer,
        dtype=str,
        na_values=[na_token],
        keep_default_na=False,
    )


def load_outcome_measures(
    source: Optional[Union[str, Path]] = None,
    *,
    na_token: Optional[str] = None,
    timeout_seconds: int = DOWNLOAD_TIMEOUT_SECONDS,
) -> pd.DataFrame:
    """
    Read the raw outcome-of-care measures into a wide DataFrame
    (one row per hospital).

    Parameters:
      - source: local path or http(s) URL; defaults to config.default_source()
      - na_token: string marking missing values (defaults to config.NA_TOKEN)
      - timeout_seconds: HTTP timeout, only used for URL sources
    """
    src = str(source) if source is not None else default_source()
    token = NA_TOKEN if na_token is None else na_token

    if _is_url(src):
        logger.info("Downloading outcome-of-care measures from %s", src)
        buffer: Union[Path, io.StringIO] = io.StringIO(_download_csv_text(src, timeout_seconds))
    else:
        path = Path(src)
        if not path.exists():
            raise DataLoaderError(
                f"Outcome-of-care file not found: {path}. "
                "Set HOSPITAL_COMPARE_CSV_PATH or HOSPITAL_COMPARE_CSV_URL, "
                "or place the file under data/."
            )
        buffer = path

    try:
        df = _read_csv(buffer, token)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataLoaderError(f"Could not parse outcome-of-care CSV from {src}: {exc}") from exc

    logger.info("Loaded %s rows x %s columns from %s", df.shape[0], df.shape[1], src)
    return df

