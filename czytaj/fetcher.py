"""Network retrieval of feed documents for czytaj."""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
USER_AGENT = "czytaj/0.1 (+feed reader)"


def fetch_bytes(url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Fetch the raw body of a feed.

    Args:
        url: URL of the RSS/Atom/JSON feed
        timeout: Request timeout in seconds

    Returns:
        Response body as bytes

    Raises:
        FetchError: If the request fails or the server answers with an error status
        DecodeError: If the body cannot be decoded as text
    """
    response = _get(url, timeout)
    _decode_body(response)
    return response.content


def fetch_text(url: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Fetch a feed and return its body decoded as text.

    Args:
        url: URL of the RSS/Atom/JSON feed
        timeout: Request timeout in seconds

    Returns:
        Decoded response body

    Raises:
        FetchError: If the request fails or the server answers with an error status
        DecodeError: If the body cannot be decoded as text
    """
    return _decode_body(_get(url, timeout))


def _get(url: str, timeout: float) -> requests.Response:
    """Perform a single GET request, without retries."""
    logger.debug("Fetching %s", url)
    try:
        response = requests.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Fetching %s failed: %s", url, e)
        raise FetchError(f"Failed to fetch feed: {e}") from e
    return response


def _decode_body(response: requests.Response) -> str:
    """Decode a response body into text.

    A charset declared in the Content-Type header wins. Without one, UTF-8
    is tried first, then the encoding detected from the body itself.
    """
    content = response.content
    content_type = response.headers.get("Content-Type", "")

    if "charset" in content_type.lower() and response.encoding:
        candidates = [response.encoding]
    else:
        candidates = ["utf-8-sig", _apparent_encoding(response)]

    for encoding in candidates:
        if not encoding:
            continue
        try:
            return content.decode(encoding)
        except (LookupError, TypeError, UnicodeDecodeError) as e:
            logger.debug("Decoding %s as %s failed: %s", response.url, encoding, e)

    raise DecodeError(f"Failed to decode feed content from {response.url}")


def _apparent_encoding(response: requests.Response) -> Optional[str]:
    try:
        return response.apparent_encoding
    except (LookupError, TypeError):
        return None


class FetchError(Exception):
    """Raised when a feed cannot be retrieved."""

    pass


class DecodeError(FetchError):
    """Raised when a fetched feed body is not decodable as text."""

    pass
