# === 📦 IMPORTS ===
import os, time, asyncio, logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Sequence
from aiohttp import ClientSession, ClientTimeout
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from video_records import VideoRecord, extract_videos
from youtube_fetcher import UpstreamError, fetch_search_page
from yt_initial_data import DEFAULT_MARKERS, extract_embedded_json

# === ℹ️ LOGGING ===
start_time = time.monotonic()


class ElapsedFormatter(logging.Formatter):
    def format(self, record):
        elapsed = time.monotonic() - start_time
        record.elapsed_time = f"{elapsed:.2f}s"
        return super().format(record)


formatter_str = "%(elapsed_time)s [%(levelname)s] %(message)s"

logging.basicConfig(level=logging.INFO, format=formatter_str)

for handler in logging.getLogger().handlers:
    handler.setFormatter(ElapsedFormatter(formatter_str))

for lib in ["aiohttp", "asyncio", "urllib3"]:
    logging.getLogger(lib).setLevel(logging.WARNING)

# === ⚙️ CONFIGURATION ===
PORT = int(os.environ.get("PORT", "3000"))
FETCH_TIMEOUT = float(os.environ.get("FETCH_TIMEOUT", "10"))
RATE_LIMIT_MAX = int(os.environ.get("RATE_LIMIT_MAX", "30"))
RATE_LIMIT_WINDOW = int(os.environ.get("RATE_LIMIT_WINDOW", "60"))
RATE_LIMIT = f"{RATE_LIMIT_MAX}/{RATE_LIMIT_WINDOW} seconds"

DEFAULT_RESULTS = 12
MAX_RESULTS_CAP = 50

SAFE_SEARCH_BLACKLIST = ("porn", "nude", "nsfw", "sex", "xxx", "adult", "erotic")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
}

INDEX_PATH = Path(__file__).with_name("index.html")

timeout_obj = ClientTimeout(total=FETCH_TIMEOUT)
client_session: ClientSession | None = None
_session_lock = asyncio.Lock()
limiter = Limiter(key_func=get_remote_address, default_limits=[RATE_LIMIT])


async def get_client_session():
    global client_session
    async with _session_lock:
        if client_session is None or client_session.closed:
            client_session = ClientSession(timeout=timeout_obj)
    return client_session


# === 🛡️ SAFETY + PAGINATION ===
def is_safe(video: VideoRecord, blacklist: Sequence[str]) -> bool:
    text = f"{video.title} {video.channel_name or ''}".lower()
    return not any(word in text for word in blacklist)


def filter_safe(
    videos: list[VideoRecord], blacklist: Sequence[str] = SAFE_SEARCH_BLACKLIST
) -> list[VideoRecord]:
    return [v for v in videos if is_safe(v, blacklist)]


def clamp_results(requested: int) -> int:
    return max(0, min(MAX_RESULTS_CAP, requested))


# === 🚀 FASTAPI ROUTES ===
@asynccontextmanager
async def lifespan(_: FastAPI):
    logging.info(f"=== SERVER READY (port {PORT}) ===")
    yield
    if client_session:
        await client_session.close()


app = FastAPI(lifespan=lifespan)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
def rate_limited(request: Request, exc: RateLimitExceeded):
    client = get_remote_address(request)
    logging.info(f"RATE LIMIT - {client} ({exc.detail})")
    return JSONResponse(status_code=429, content={"error": "too many requests"})


# Registration order: the last middleware added runs first.
app.add_middleware(SlowAPIMiddleware)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.get("/", response_class=HTMLResponse)
def index():
    return INDEX_PATH.read_text(encoding="utf-8")


@app.get("/api/search")
async def search(
    q: str = "",
    max_results: int = Query(DEFAULT_RESULTS, alias="max"),
    safe: str = "true",
):
    query = q.strip()
    if not query:
        return JSONResponse(status_code=400, content={"error": "missing q parameter"})

    limit = clamp_results(max_results)
    logging.info(f"SEARCH - '{query}' (max={limit}, safe={safe})")

    try:
        session = await get_client_session()
        html = await fetch_search_page(session, query)

        initial_data = extract_embedded_json(html, DEFAULT_MARKERS)
        if initial_data is None:
            logging.error(f"EXTRACT ERROR - No usable data for '{query}'")
            return JSONResponse(
                status_code=500, content={"error": "Could not extract data"}
            )

        videos = extract_videos(initial_data)
        if (safe or "true") == "true":
            videos = filter_safe(videos, SAFE_SEARCH_BLACKLIST)
        videos = videos[:limit]
    except UpstreamError as e:
        return JSONResponse(status_code=e.status, content={"error": str(e)})
    except Exception as e:
        logging.error(f"SEARCH ERROR - {type(e).__name__}: {e}")
        return JSONResponse(
            status_code=500, content={"error": "server error", "detail": str(e)}
        )

    logging.info(f"RESULTS - {len(videos)} video(s) for '{query}'")
    return {
        "query": query,
        "count": len(videos),
        "results": [v.to_dict() for v in videos],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
