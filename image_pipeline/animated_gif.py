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

"""
Builds a two-frame animated GIF from hosted images and uploads it.

The images are loaded directly first. Each input whose direct load fails
is reduced to its public id and loaded through an ordered list of candidate
URLs (raw delivery URL, then auto-format), first success wins.
"""

from __future__ import annotations

import concurrent.futures
import functools
import io
import logging
import uuid
from typing import Callable, List, Optional, Sequence, Tuple

from PIL import Image

from image_pipeline import fetch_utils
from image_pipeline.cloudinary import ImageHost, UploadResult, extract_public_id
from image_pipeline.fetch_utils import ImageLoadError

logger = logging.getLogger(__name__)

DEFAULT_FRAME_DELAY_MS = 500
ANIMATED_GIF_TAG = "animated-gif"
BACKGROUND_COLOR = (255, 255, 255)

ImageLoader = Callable[[str], Image.Image]
CandidateResolver = Callable[[str], str]


class AnimatedGifError(Exception):
    """A phase of the GIF pipeline failed with no fallback left."""


def candidate_resolvers(host: ImageHost) -> List[CandidateResolver]:
    """URL builders tried in order for a public id during the fallback phase."""
    return [
        lambda public_id: host.get_image_url(public_id),
        lambda public_id: host.get_image_url(public_id, format="auto"),
    ]


def load_first_candidate(
    source: str,
    resolvers: Sequence[CandidateResolver],
    loader: ImageLoader,
) -> Image.Image:
    """
    Loads `source` through the first candidate URL that works.

    Raises:
        AnimatedGifError: If no public id can be derived from `source` or
            every candidate URL fails.
    """
    public_id = extract_public_id(source)
    if not public_id:
        raise AnimatedGifError(f"Could not derive a public id from {source!r}")

    attempted = []
    for resolve in resolvers:
        url = resolve(public_id)
        attempted.append(url)
        try:
            return loader(url)
        except ImageLoadError as e:
            logger.warning("Candidate URL failed for %s: %s", public_id, e)
    raise AnimatedGifError(
        f"Could not load image {public_id!r}; tried {', '.join(attempted)}"
    )


def _load_all(
    sources: Sequence[str], load_one: Callable[[str], Optional[Image.Image]]
) -> List[Optional[Image.Image]]:
    # All loads run to completion; the first failure is re-raised.
    with concurrent.futures.ThreadPoolExecutor(max_workers=len(sources)) as executor:
        futures = [executor.submit(load_one, source) for source in sources]
        concurrent.futures.wait(futures)
    return [future.result() for future in futures]


def load_images(
    first: str,
    second: str,
    host: ImageHost,
    loader: ImageLoader,
) -> Tuple[Image.Image, Image.Image]:
    """
    Runs the direct-load phase, then the fallback phase for the inputs whose
    direct load failed. Directly loaded frames are kept as they are.
    """

    def load_direct(source: str) -> Optional[Image.Image]:
        try:
            return loader(source)
        except ImageLoadError as e:
            logger.info("Direct image load failed (%s); trying candidate URLs", e)
            return None

    sources = (first, second)
    images = _load_all(sources, load_direct)
    failed = [index for index, image in enumerate(images) if image is None]
    if failed:
        resolvers = candidate_resolvers(host)
        recovered = _load_all(
            [sources[index] for index in failed],
            lambda source: load_first_candidate(source, resolvers, loader),
        )
        for index, image in zip(failed, recovered):
            images[index] = image
    return images[0], images[1]


def assemble_gif(
    images: Sequence[Image.Image], frame_delay: int = DEFAULT_FRAME_DELAY_MS
) -> bytes:
    """
    Encodes the images as a looping GIF.

    Every frame is drawn on a white canvas the size of the first image, with
    each image scaled to fill it.
    """
    if not images:
        raise AnimatedGifError("No frames to encode")
    size = images[0].size
    frames = []
    for image in images:
        frame = image.convert("RGBA")
        if frame.size != size:
            frame = frame.resize(size)
        canvas = Image.new("RGB", size, BACKGROUND_COLOR)
        canvas.paste(frame, (0, 0), frame)
        frames.append(canvas)

    buffer = io.BytesIO()
    frames[0].save(
        buffer,
        format="GIF",
        save_all=True,
        append_images=frames[1:],
        duration=frame_delay,
        loop=0,
    )
    return buffer.getvalue()


def upload_animated_gif(
    first_image: str,
    second_image: str,
    host: ImageHost,
    *,
    frame_delay: int = DEFAULT_FRAME_DELAY_MS,
    public_id: Optional[str] = None,
    folder: Optional[str] = None,
    loader: Optional[ImageLoader] = None,
    timeout: float = fetch_utils.REQUEST_TIMEOUT,
) -> UploadResult:
    """
    Builds a two-frame GIF from two hosted images and uploads it.

    Args:
        first_image (str): URL or public id of the first frame. Its size sets
            the size of the GIF.
        second_image (str): URL or public id of the second frame.
        host (ImageHost): Where candidate URLs are built and the GIF is
            uploaded.
        frame_delay (int): Delay between frames in milliseconds.
        public_id (str): Public id for the upload; generated when omitted.
        folder (str): Optional upload folder.
        loader: Fetches and decodes one image URL. Defaults to an HTTP loader.

    Returns:
        UploadResult: The hosted URL of the GIF, or the error that ended the
        pipeline.
    """
    loader = loader or functools.partial(fetch_utils.load_image, timeout=timeout)
    try:
        images = load_images(first_image, second_image, host, loader)
        payload = assemble_gif(images, frame_delay)
    except (AnimatedGifError, OSError, ValueError) as e:
        logger.error("Animated GIF pipeline failed: %s", e)
        return UploadResult(success=False, error=str(e))

    public_id = public_id or f"animated_{uuid.uuid4().hex[:12]}"
    filename = f"{public_id.rsplit('/', 1)[-1]}.gif"
    logger.info("Uploading animated GIF %s (%d bytes)", public_id, len(payload))
    return host.upload_image(
        payload,
        filename=filename,
        folder=folder,
        tags=[ANIMATED_GIF_TAG],
        public_id=public_id,
    )
