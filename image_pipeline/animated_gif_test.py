# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import io
import unittest

from PIL import Image

from image_pipeline import animated_gif
from image_pipeline.cloudinary import InMemoryImageHost
from image_pipeline.fetch_utils import ImageLoadError

RED = (255, 0, 0)
BLUE = (0, 0, 255)


class FakeLoader:
    """Serves solid-color images for known URLs and fails for the rest."""

    def __init__(self, images):
        self.images = images
        self.requested = []

    def __call__(self, url):
        self.requested.append(url)
        if url not in self.images:
            raise ImageLoadError(url, "404 Not Found")
        return self.images[url]


def solid(color, size=(40, 30)):
    return Image.new("RGB", size, color)


class AnimatedGifTest(unittest.TestCase):

    def setUp(self):
        self.host = InMemoryImageHost()
        self.first_url = "https://example.test/demo/image/upload/v1/workouts/first.jpg"
        self.second_url = "https://example.test/demo/image/upload/v1/workouts/second.jpg"

    def _frames(self, payload):
        gif = Image.open(io.BytesIO(payload))
        frames = []
        for index in range(gif.n_frames):
            gif.seek(index)
            frames.append((gif.convert("RGB").getpixel((5, 5)), gif.info.get("duration")))
        return gif, frames

    def test_direct_load_builds_two_frame_gif(self):
        loader = FakeLoader({self.first_url: solid(RED), self.second_url: solid(BLUE)})

        result = animated_gif.upload_animated_gif(
            self.first_url,
            self.second_url,
            self.host,
            frame_delay=300,
            loader=loader,
        )

        self.assertTrue(result.success)
        upload = self.host.uploads[0]
        self.assertEqual(upload["tags"], ["animated-gif"])
        self.assertTrue(upload["public_id"].startswith("animated_"))
        self.assertTrue(upload["filename"].endswith(".gif"))

        gif, frames = self._frames(upload["content"])
        self.assertEqual(gif.size, (40, 30))
        self.assertEqual(len(frames), 2)
        self.assertEqual(frames[0], (RED, 300))
        self.assertEqual(frames[1], (BLUE, 300))
        self.assertEqual(gif.info.get("loop"), 0)

    def test_second_frame_is_scaled_to_first(self):
        loader = FakeLoader(
            {self.first_url: solid(RED), self.second_url: solid(BLUE, size=(10, 10))}
        )
        result = animated_gif.upload_animated_gif(
            self.first_url, self.second_url, self.host, loader=loader
        )
        self.assertTrue(result.success)
        gif = Image.open(io.BytesIO(self.host.uploads[0]["content"]))
        self.assertEqual(gif.size, (40, 30))

    def test_transparent_pixels_are_drawn_on_white(self):
        transparent = Image.new("RGBA", (40, 30), (0, 0, 0, 0))
        loader = FakeLoader({self.first_url: transparent, self.second_url: solid(BLUE)})
        animated_gif.upload_animated_gif(
            self.first_url, self.second_url, self.host, loader=loader
        )
        _, frames = self._frames(self.host.uploads[0]["content"])
        self.assertEqual(frames[0][0], (255, 255, 255))

    def test_fallback_tries_candidate_urls(self):
        raw_first = self.host.get_image_url("workouts/first")
        auto_second = self.host.get_image_url("workouts/second", format="auto")
        loader = FakeLoader({raw_first: solid(RED), auto_second: solid(BLUE)})

        result = animated_gif.upload_animated_gif(
            self.first_url, self.second_url, self.host, loader=loader
        )

        self.assertTrue(result.success)
        raw_second = self.host.get_image_url("workouts/second")
        self.assertIn(raw_first, loader.requested)
        self.assertIn(raw_second, loader.requested)
        self.assertIn(auto_second, loader.requested)
        self.assertNotIn(self.host.get_image_url("workouts/first", format="auto"), loader.requested)
        _, frames = self._frames(self.host.uploads[0]["content"])
        self.assertEqual([color for color, _ in frames], [RED, BLUE])

    def test_direct_frame_is_kept_when_the_other_falls_back(self):
        external = "https://images.example.org/photos/first.png"
        raw_second = self.host.get_image_url("workouts/second")
        loader = FakeLoader({external: solid(RED), raw_second: solid(BLUE)})

        result = animated_gif.upload_animated_gif(
            external, self.second_url, self.host, loader=loader
        )

        self.assertTrue(result.success)
        self.assertEqual(loader.requested.count(external), 1)
        self.assertNotIn(self.host.get_image_url(external), loader.requested)
        _, frames = self._frames(self.host.uploads[0]["content"])
        self.assertEqual([color for color, _ in frames], [RED, BLUE])

    def test_bare_public_ids_use_candidates(self):
        loader = FakeLoader(
            {
                self.host.get_image_url("first"): solid(RED),
                self.host.get_image_url("second"): solid(BLUE),
            }
        )
        result = animated_gif.upload_animated_gif("first", "second", self.host, loader=loader)
        self.assertTrue(result.success)

    def test_all_candidates_failing_reports_error(self):
        loader = FakeLoader({})

        result = animated_gif.upload_animated_gif(
            self.first_url, self.second_url, self.host, loader=loader
        )

        self.assertFalse(result.success)
        self.assertIn("workouts/", result.error)
        self.assertEqual(self.host.uploads, [])
        # Two direct loads, then raw and auto-format candidates for each image.
        self.assertEqual(len(loader.requested), 6)

    def test_upload_failure_is_returned(self):
        self.host.fail_uploads = True
        loader = FakeLoader({self.first_url: solid(RED), self.second_url: solid(BLUE)})
        result = animated_gif.upload_animated_gif(
            self.first_url, self.second_url, self.host, loader=loader, public_id="fixed"
        )
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Upload rejected")

    def test_public_id_and_folder_are_passed_through(self):
        loader = FakeLoader({self.first_url: solid(RED), self.second_url: solid(BLUE)})
        result = animated_gif.upload_animated_gif(
            self.first_url,
            self.second_url,
            self.host,
            loader=loader,
            public_id="combo",
            folder="gifs",
        )
        self.assertTrue(result.success)
        self.assertEqual(self.host.uploads[0]["public_id"], "gifs/combo")
        self.assertEqual(self.host.uploads[0]["filename"], "combo.gif")


if __name__ == "__main__":
    unittest.main()
