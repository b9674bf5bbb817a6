import logging
from urllib.parse import quote_plus

from aiohttp import ClientSession

SEARCH_URL = "https://www.youtube.com/results?search_query={query}"

REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://www.youtube.com/",
}


class UpstreamError(Exception):
    def __init__(self, status: int):
        super().__init__(f"YouTube fetch failed: {status}")
        self.status = status


def build_search_url(query: str) -> str:
    return SEARCH_URL.format(query=quote_plus(query))


async def fetch_search_page(session: ClientSession, query: str) -> str:
    url = build_search_url(query)
    logging.info(f"FETCH - {url}")
    async with session.get(url, headers=REQUEST_HEADERS, allow_redirects=True) as resp:
        if not 200 <= resp.status < 300:
            logging.warning(f"FETCH ERROR - HTTP {resp.status} for {url}")
            raise UpstreamError(resp.status)
        return await resp.text()
