import logging
import time

import httpx

logger = logging.getLogger("loserpool.feed")

DEFAULT_HEADERS = {
    "User-Agent": "LoserPool/0.1 (schedule sync)",
    "Accept": "application/json",
}


def make_client() -> httpx.Client:
    # the scoreboard endpoint sometimes stalls on Sundays
    timeout = httpx.Timeout(connect=10.0, read=30.0, write=10.0, pool=10.0)
    return httpx.Client(headers=DEFAULT_HEADERS, timeout=timeout, follow_redirects=True)


def get_with_retry(
    client: httpx.Client,
    url: str,
    params: dict | None = None,
    retries: int = 2,
    backoff_s: float = 1.0,
) -> httpx.Response:
    for attempt in range(retries + 1):
        try:
            resp = client.get(url, params=params)
            resp.raise_for_status()
            return resp
        except (httpx.ReadTimeout, httpx.ConnectTimeout, httpx.NetworkError) as exc:
            if attempt < retries:
                logger.warning("GET %s failed (%s); retry %d/%d", url, exc, attempt + 1, retries)
                time.sleep(backoff_s * (attempt + 1))
                continue
            raise
    raise RuntimeError("unreachable")
