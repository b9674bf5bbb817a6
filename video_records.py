import logging
from dataclasses import dataclass
from typing import Any

EMBED_URL = "https://www.youtube-nocookie.com/embed/{video_id}"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

SECTIONS_PATH = (
    "contents",
    "twoColumnSearchResultsRenderer",
    "primaryContents",
    "sectionListRenderer",
    "contents",
)


@dataclass(frozen=True)
class VideoRecord:
    video_id: str | None
    title: str
    thumbnail_url: str | None
    duration_text: str | None
    channel_name: str | None
    embed_url: str | None
    watch_url: str | None

    def to_dict(self) -> dict:
        return {
            "videoId": self.video_id,
            "title": self.title,
            "thumbnail": self.thumbnail_url,
            "length": self.duration_text,
            "channel": self.channel_name,
            "embed": self.embed_url,
            "watch": self.watch_url,
        }


def dig(value: Any, *path):
    """Follow dict keys / list indices, returning None at the first miss."""
    for step in path:
        if isinstance(step, int):
            if not isinstance(value, list) or not -len(value) <= step < len(value):
                return None
            value = value[step]
        else:
            if not isinstance(value, dict):
                return None
            value = value.get(step)
        if value is None:
            return None
    return value


def clean_text(value: str) -> str:
    # Lone surrogates from truncated \uXXXX escapes cannot be UTF-8 encoded.
    return value.encode("utf-8", "replace").decode("utf-8")


def text_or_none(value):
    return clean_text(value) if isinstance(value, str) and value else None


def join_title(renderer: dict) -> str:
    runs = dig(renderer, "title", "runs")
    if isinstance(runs, list) and runs:
        return clean_text(
            "".join(
                text
                for text in (dig(run, "text") for run in runs)
                if isinstance(text, str)
            )
        )
    simple = dig(renderer, "title", "simpleText")
    return clean_text(simple) if isinstance(simple, str) else ""


def pick_thumbnail(renderer: dict):
    # Assumes the provider lists thumbnails smallest first.
    thumbnails = dig(renderer, "thumbnail", "thumbnails")
    if not isinstance(thumbnails, list) or not thumbnails:
        return None
    return text_or_none(dig(thumbnails, -1, "url"))


def build_record(renderer: dict) -> VideoRecord:
    video_id = text_or_none(renderer.get("videoId"))
    return VideoRecord(
        video_id=video_id,
        title=join_title(renderer),
        thumbnail_url=pick_thumbnail(renderer),
        duration_text=text_or_none(dig(renderer, "lengthText", "simpleText")),
        channel_name=text_or_none(dig(renderer, "ownerText", "runs", 0, "text")),
        embed_url=EMBED_URL.format(video_id=video_id) if video_id else None,
        watch_url=WATCH_URL.format(video_id=video_id) if video_id else None,
    )


def extract_videos(initial_data) -> list[VideoRecord]:
    results: list[VideoRecord] = []

    sections = dig(initial_data, *SECTIONS_PATH)
    if not isinstance(sections, list):
        logging.warning("RECORDS - Section list missing from embedded data")
        return results

    for section_index, section in enumerate(sections):
        try:
            items = dig(section, "itemSectionRenderer", "contents")
            if not isinstance(items, list):
                continue
        except Exception as e:
            logging.error(f"RECORDS ERROR - Section {section_index}: {e}")
            continue

        for item_index, item in enumerate(items):
            try:
                renderer = dig(item, "videoRenderer")
                if not isinstance(renderer, dict):
                    continue
                results.append(build_record(renderer))
            except Exception as e:
                logging.error(
                    f"RECORDS ERROR - Item {section_index}.{item_index}: "
                    f"{type(e).__name__}: {e}"
                )

    logging.debug(f"RECORDS - Recovered {len(results)} video(s)")
    return results
