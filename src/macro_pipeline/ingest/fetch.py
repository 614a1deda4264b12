"""Dataset download and streaming helpers.

Remote CSV extracts are streamed line by line so a multi-hundred-megabyte
file is never held in memory. Redirects are followed by hand so the hop
count and the wall-clock budget apply across the whole chain.
"""

import codecs
import csv
import os
import time
from typing import Any, Dict, Iterator, Optional
from urllib.parse import urljoin, urlparse

import requests

from macro_pipeline import config
from macro_pipeline.error_handler import retryable_operation
from macro_pipeline.exceptions import (
    FetchError,
    FetchTimeoutError,
    IngestError,
    TooManyRedirectsError,
)
from macro_pipeline.logging_config import create_logger

logger = create_logger(__name__)

REDIRECT_STATUSES = {301, 302, 303, 307, 308}
CONNECT_TIMEOUT = 30.0


def is_remote(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def open_stream(
    url: str,
    timeout: Optional[float] = None,
    max_redirects: Optional[int] = None,
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """GET ``url`` with streaming, following redirects up to ``max_redirects``.

    :param url: http(s) URL
    :param timeout: overall wall-clock budget in seconds for reaching a 2xx
    :param max_redirects: maximum number of redirect hops
    :param session: requests session to reuse
    :return: open streaming response with a 2xx status
    :raises TooManyRedirectsError: redirect chain longer than max_redirects
    :raises FetchTimeoutError: wall-clock budget exhausted
    :raises FetchError: any other transport failure or non-2xx status
    """
    timeout = config.HTTP_TIMEOUT_SECONDS if timeout is None else timeout
    max_redirects = config.MAX_REDIRECTS if max_redirects is None else max_redirects
    session = session or requests.Session()

    deadline = time.monotonic() + timeout
    current = url
    hops = 0

    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise FetchTimeoutError(f"Download of {url} exceeded {timeout:.0f}s")

        try:
            response = session.get(
                current,
                stream=True,
                allow_redirects=False,
                timeout=(min(CONNECT_TIMEOUT, remaining), remaining),
            )
        except requests.Timeout as e:
            raise FetchTimeoutError(f"Timed out fetching {current}: {e}") from e
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {current}: {e}") from e

        status = response.status_code
        if status in REDIRECT_STATUSES:
            location = response.headers.get("Location")
            response.close()
            if not location:
                raise FetchError(f"HTTP {status} from {current} without Location header")
            hops += 1
            if hops > max_redirects:
                raise TooManyRedirectsError(
                    f"More than {max_redirects} redirects fetching {url}"
                )
            current = urljoin(current, location)
            logger.info(f"   ↪️  Redirect {hops}: {current}")
            continue

        if 200 <= status < 300:
            logger.info(f"   📥 Connected to {current} (HTTP {status})")
            return response

        response.close()
        raise FetchError(f"HTTP {status} fetching {current}")


def stream_encoding(response: requests.Response) -> str:
    """Text encoding for a streamed CSV.

    Only a charset the server states explicitly is honoured; requests
    reports ISO-8859-1 for any ``text/*`` body without one.
    """
    content_type = response.headers.get("Content-Type", "").lower()
    charset = response.encoding if "charset=" in content_type else None
    if not charset or charset.lower().replace("-", "").replace("_", "") == "utf8":
        # utf-8-sig drops the byte-order mark WDI extracts start with
        return "utf-8-sig"
    return charset


def iter_lines(location: str, **fetch_kwargs) -> Iterator[str]:
    """Yield decoded text lines from a URL or a local file path."""
    if is_remote(location):
        response = open_stream(location, **fetch_kwargs)
        try:
            encoding = stream_encoding(response)
            for line in codecs.iterdecode(response.iter_lines(), encoding):
                yield line
        except requests.RequestException as e:
            raise FetchError(f"Stream from {location} interrupted: {e}") from e
        except (UnicodeDecodeError, LookupError) as e:
            raise IngestError(f"Cannot decode {location}: {e}") from e
        finally:
            response.close()
        return

    if not os.path.isfile(location):
        raise IngestError(f"Source file not found: {location}")
    with open(location, newline="", encoding="utf-8-sig") as handle:
        for line in handle:
            yield line


def iter_csv_rows(location: str, **fetch_kwargs) -> Iterator[Dict[str, str]]:
    """Stream a comma-delimited file with a header row as dictionaries."""
    reader = csv.DictReader(iter_lines(location, **fetch_kwargs))
    for row in reader:
        yield row


@retryable_operation(max_attempts=3, initial_delay=1.0)
def fetch_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    session: Optional[requests.Session] = None,
    timeout: float = 60.0,
) -> Any:
    """GET a JSON document; transient failures are retried with backoff."""
    session = session or requests.Session()
    response = session.get(url, params=params, timeout=timeout)
    response.raise_for_status()
    return response.json()
