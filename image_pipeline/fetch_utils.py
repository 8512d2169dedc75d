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

import requests
from PIL import Image

REQUEST_TIMEOUT = 30  # seconds


class ImageLoadError(Exception):
    """An image could not be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Could not load image from {url}: {reason}")
        self.url = url


def fetch_image_bytes(url: str, timeout: float = REQUEST_TIMEOUT) -> bytes:
    """
    Fetches the content of a given URL.

    Args:
        url (str): The URL to fetch the image from.

    Returns:
        bytes: The response body, raises ImageLoadError otherwise.
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise ImageLoadError(url, str(e)) from e
    return response.content


def load_image(url: str, timeout: float = REQUEST_TIMEOUT) -> Image.Image:
    """
    Fetches and decodes an image.

    The pixel data is read eagerly so the returned image does not depend on
    the response buffer.
    """
    content = fetch_image_bytes(url, timeout=timeout)
    try:
        image = Image.open(io.BytesIO(content))
        image.load()
    except OSError as e:
        raise ImageLoadError(url, f"not a decodable image ({e})") from e
    return image
