"""
TidyTuesday Client — British Library funding CSV from the TidyTuesday repo.

Downloads bl_funding.csv for the 2025-07-15 TidyTuesday week and caches it in
the raw data directory. If the download fails, the cached copy from a previous
run is used; only when neither is available is DatasetUnavailableError raised.

Uses only Python stdlib (urllib.request).
"""
import logging
import os
import urllib.error
import urllib.request
from typing import Optional

from bl_funding import __version__
from bl_funding.config import DEFAULT_CONFIG, BLFundingConfig
from bl_funding.errors import DatasetUnavailableError

logger = logging.getLogger(__name__)

USER_AGENT = f"bl-funding/{__version__} (+https://github.com/rfordatascience/tidytuesday)"


def _get(url: str, timeout: float) -> Optional[bytes]:
    """Perform a GET request with error handling.

    Args:
        url:     Full URL to fetch.
        timeout: Socket timeout in seconds.

    Returns:
        Raw response body, or None on any network error.
    """
    try:
        req = urllib.request.Request(
            url,
            headers={"Accept": "text/csv", "User-Agent": USER_AGENT},
        )
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.read()
    except urllib.error.HTTPError as exc:
        logger.warning("TidyTuesday HTTP %d error fetching %s: %s", exc.code, url, exc.reason)
        return None
    except urllib.error.URLError as exc:
        logger.warning("TidyTuesday network error fetching %s: %s", url, exc.reason)
        return None
    except TimeoutError as exc:
        logger.warning("TidyTuesday request timed out fetching %s: %s", url, exc)
        return None
    except Exception as exc:  # noqa: BLE001
        logger.warning("TidyTuesday unexpected error fetching %s: %s", url, exc)
        return None


def fetch_bl_funding(
    cache_path: str,
    config: BLFundingConfig = DEFAULT_CONFIG,
    offline: bool = False,
) -> str:
    """Make sure bl_funding.csv exists at `cache_path`, downloading it if needed.

    Args:
        cache_path: Where the raw CSV is (or will be) stored.
        config:     BLFundingConfig. Uses config.dataset_url and
                    config.request_timeout_s.
        offline:    If True, never touch the network; use the cache only.

    Returns:
        cache_path, once it holds a CSV.

    Raises:
        DatasetUnavailableError: if the download fails (or offline=True) and
                                 no cached copy exists.
    """
    if offline:
        if os.path.isfile(cache_path):
            logger.info("Offline mode: using cached dataset %s", cache_path)
            return cache_path
        raise DatasetUnavailableError(f"offline mode and no cached dataset at {cache_path}")

    logger.info("Fetching British Library funding data (%s): %s",
                config.tidytuesday_week, config.dataset_url)
    body = _get(config.dataset_url, config.request_timeout_s)

    if body is None:
        if os.path.isfile(cache_path):
            logger.warning("Download failed — falling back to cached dataset %s", cache_path)
            return cache_path
        raise DatasetUnavailableError(
            f"could not download {config.dataset_url} and no cached copy at {cache_path}"
        )

    os.makedirs(os.path.dirname(cache_path) or ".", exist_ok=True)
    with open(cache_path, "wb") as fh:
        fh.write(body)
    logger.info("Saved %d bytes to %s", len(body), cache_path)
    return cache_path
