import dataclasses
import unittest
from unittest import mock

import video_records
from video_records import VideoRecord, dig, extract_videos


def renderer(video_id="abc123", **overrides):
    data = {
        "videoId": video_id,
        "title": {"runs": [{"text": "Hello "}, {"text": "World"}]},
        "thumbnail": {
            "thumbnails": [
                {"url": "http://x/low.jpg"},
                {"url": "http://x/mid.jpg"},
                {"url": "http://x/high.jpg"},
            ]
        },
        "lengthText": {"simpleText": "10:02"},
        "ownerText": {"runs": [{"text": "Channel"}, {"text": "ignored"}]},
    }
    if video_id is None:
        del data["videoId"]
    data.update(overrides)
    return data


def initial_data(*sections):
    return {
        "contents": {
            "twoColumnSearchResultsRenderer": {
                "primaryContents": {
                    "sectionListRenderer": {
                        "contents": [
                            {"itemSectionRenderer": {"contents": list(items)}}
                            for items in sections
                        ]
                    }
                }
            }
        }
    }


class DigTests(unittest.TestCase):
    def test_follows_keys_and_indices(self):
        data = {"a": [{"b": "c"}]}
        self.assertEqual(dig(data, "a", 0, "b"), "c")
        self.assertEqual(dig(data, "a", -1, "b"), "c")

    def test_absence_and_wrong_shape_yield_none(self):
        data = {"a": [{"b": "c"}], "s": "text"}
        self.assertIsNone(dig(data, "missing", "b"))
        self.assertIsNone(dig(data, "a", 3))
        self.assertIsNone(dig(data, "a", "b"))
        self.assertIsNone(dig(data, "s", 0))
        self.assertIsNone(dig(None, "a"))
        self.assertIsNone(dig({"a": []}, "a", -1))


class ExtractVideosTests(unittest.TestCase):
    def test_missing_path_returns_empty(self):
        self.assertEqual(extract_videos({}), [])
        self.assertEqual(extract_videos({"contents": {"other": 1}}), [])
        self.assertEqual(extract_videos(None), [])
        self.assertEqual(extract_videos([1, 2]), [])

    def test_full_record(self):
        [video] = extract_videos(initial_data([{"videoRenderer": renderer()}]))
        self.assertEqual(
            video,
            VideoRecord(
                video_id="abc123",
                title="Hello World",
                thumbnail_url="http://x/high.jpg",
                duration_text="10:02",
                channel_name="Channel",
                embed_url="https://www.youtube-nocookie.com/embed/abc123",
                watch_url="https://www.youtube.com/watch?v=abc123",
            ),
        )

    def test_mixed_items_keep_only_videos_in_order(self):
        data = initial_data(
            [
                {"videoRenderer": renderer("one")},
                {"adSlotRenderer": {"foo": 1}},
                "not a dict",
                None,
                {"videoRenderer": renderer("two")},
            ],
            [{"shelfRenderer": {}}, {"videoRenderer": renderer("three")}],
        )
        data["contents"]["twoColumnSearchResultsRenderer"]["primaryContents"][
            "sectionListRenderer"
        ]["contents"].insert(1, {"continuationItemRenderer": {}})
        ids = [v.video_id for v in extract_videos(data)]
        self.assertEqual(ids, ["one", "two", "three"])

    def test_missing_id_has_no_urls(self):
        [video] = extract_videos(initial_data([{"videoRenderer": renderer(None)}]))
        self.assertIsNone(video.video_id)
        self.assertIsNone(video.embed_url)
        self.assertIsNone(video.watch_url)
        self.assertEqual(video.title, "Hello World")

    def test_title_falls_back_to_simple_text(self):
        item = renderer(title={"simpleText": "Plain"})
        [video] = extract_videos(initial_data([{"videoRenderer": item}]))
        self.assertEqual(video.title, "Plain")

        item = renderer(title={"runs": [], "simpleText": "Fallback"})
        [video] = extract_videos(initial_data([{"videoRenderer": item}]))
        self.assertEqual(video.title, "Fallback")

    def test_malformed_fields_use_defaults(self):
        item = renderer(
            title=["wrong"],
            thumbnail={"thumbnails": {"url": "nope"}},
            lengthText="3:00",
            ownerText={"runs": []},
        )
        [video] = extract_videos(initial_data([{"videoRenderer": item}]))
        self.assertEqual(video.title, "")
        self.assertIsNone(video.thumbnail_url)
        self.assertIsNone(video.duration_text)
        self.assertIsNone(video.channel_name)

    def test_empty_thumbnail_list(self):
        item = renderer(thumbnail={"thumbnails": []})
        [video] = extract_videos(initial_data([{"videoRenderer": item}]))
        self.assertIsNone(video.thumbnail_url)

    def test_failing_item_is_skipped_and_others_kept(self):
        real_build = video_records.build_record

        def build(renderer):
            if renderer.get("videoId") == "bad":
                raise KeyError("videoId")
            return real_build(renderer)

        data = initial_data(
            [{"videoRenderer": renderer("one")}, {"videoRenderer": renderer("bad")}],
            [{"videoRenderer": renderer("two")}],
        )
        with mock.patch.object(video_records, "build_record", side_effect=build):
            ids = [v.video_id for v in extract_videos(data)]
        self.assertEqual(ids, ["one", "two"])

    def test_failing_section_is_skipped_and_others_kept(self):
        class BrokenSection(dict):
            def get(self, key, default=None):
                raise RuntimeError("broken section")

        data = initial_data(
            [{"videoRenderer": renderer("one")}],
            [{"videoRenderer": renderer("two")}],
        )
        sections = data["contents"]["twoColumnSearchResultsRenderer"][
            "primaryContents"
        ]["sectionListRenderer"]["contents"]
        sections.insert(1, BrokenSection(itemSectionRenderer={}))
        ids = [v.video_id for v in extract_videos(data)]
        self.assertEqual(ids, ["one", "two"])

    def test_lone_surrogates_are_replaced(self):
        item = renderer(
            title={"runs": [{"text": "cut "}, {"text": "\ud83d"}]},
            ownerText={"runs": [{"text": "Chan \udc00"}]},
        )
        [video] = extract_videos(initial_data([{"videoRenderer": item}]))
        self.assertEqual(video.title, "cut ?")
        self.assertEqual(video.channel_name, "Chan ?")
        self.assertEqual(video_records.clean_text("fine ✓"), "fine ✓")

    def test_records_are_immutable(self):
        [video] = extract_videos(initial_data([{"videoRenderer": renderer()}]))
        with self.assertRaises(dataclasses.FrozenInstanceError):
            video.title = "changed"

    def test_to_dict_uses_wire_keys(self):
        [video] = extract_videos(initial_data([{"videoRenderer": renderer()}]))
        self.assertEqual(
            video.to_dict(),
            {
                "videoId": "abc123",
                "title": "Hello World",
                "thumbnail": "http://x/high.jpg",
                "length": "10:02",
                "channel": "Channel",
                "embed": "https://www.youtube-nocookie.com/embed/abc123",
                "watch": "https://www.youtube.com/watch?v=abc123",
            },
        )


if __name__ == "__main__":
    unittest.main()
