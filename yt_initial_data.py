import json
import logging
from typing import Sequence

DEFAULT_MARKERS = (
    "var ytInitialData =",
    'window["ytInitialData"] =',
    "window.ytInitialData =",
)


def find_json_object_end(text: str, start: int) -> int | None:
    """Index of the `}` closing the object that opens at `start`, or None."""
    if start < 0 or start >= len(text) or text[start] != "{":
        return None

    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]

        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i

    return None


def locate_json_start(html: str, markers: Sequence[str] = DEFAULT_MARKERS):
    for marker in markers:
        idx = html.find(marker)
        if idx != -1:
            start = html.find("{", idx + len(marker))
            if start == -1:
                logging.debug(f"EXTRACT - Marker '{marker}' found but no object follows")
                return None
            return start
    return None


def extract_embedded_json(
    html: str, markers: Sequence[str] = DEFAULT_MARKERS
) -> dict | None:
    """
    Parse the JSON object assigned after the first marker found in `html`.

    Returns None when no marker matches, when the braces never balance, or
    when the isolated text is not a JSON object.
    """
    if not html or not isinstance(html, str):
        return None

    start = locate_json_start(html, markers)
    if start is None:
        logging.warning("EXTRACT - No embedded data found after known markers")
        return None

    end = find_json_object_end(html, start)
    if end is None:
        logging.warning(f"EXTRACT - Unbalanced object starting at {start}")
        return None

    try:
        data = json.loads(html[start : end + 1])
    except (ValueError, RecursionError) as e:
        logging.warning(f"EXTRACT - Invalid JSON: {type(e).__name__}: {e}")
        return None

    return data if isinstance(data, dict) else None
