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

from __future__ import annotations

import hashlib
import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional, Protocol, Sequence, Union

import requests

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.cloudinary.com/v1_1/"
DELIVERY_BASE_URL = "https://res.cloudinary.com/"
REQUEST_TIMEOUT = 60  # seconds

UPLOAD_MARKER = "/upload/"
VERSION_SEGMENT = re.compile(r"^v\d+$")

# Transformation tokens, in the order they appear in a delivery URL.
TRANSFORMATION_PREFIXES = (
    ("width", "w"),
    ("height", "h"),
    ("crop", "c"),
    ("quality", "q"),
    ("format", "f"),
    ("flags", "fl"),
)

UploadFile = Union[bytes, BinaryIO, str]


@dataclass
class UploadResult:
    success: bool
    url: Optional[str] = None
    data: dict = field(default_factory=dict)
    error: Optional[str] = None


@dataclass
class DeleteResult:
    success: bool
    error: Optional[str] = None


class ImageHost(Protocol):
    """The image CDN operations the console needs."""

    def upload_image(
        self,
        file: UploadFile,
        *,
        filename: str = "upload",
        folder: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        public_id: Optional[str] = None,
    ) -> UploadResult:
        ...

    def get_image_url(self, public_id: str, **options) -> str:
        ...

    def delete_image(self, public_id: str) -> DeleteResult:
        ...


def extract_public_id(value: Optional[str]) -> Optional[str]:
    """
    Returns the bare public id for either a public id or a delivery URL.

    For URLs, everything up to `/upload/` is dropped, along with any segments
    up to and including a `v<digits>` version segment, and the extension of
    the last segment is stripped. Input without `/upload/` is returned as is.

    Args:
        value (str): A public id or a Cloudinary delivery URL.

    Returns:
        str | None: The public id, or None for empty input.
    """
    if not value:
        return None
    if UPLOAD_MARKER not in value:
        return value

    path = value.split(UPLOAD_MARKER, 1)[1]
    path = path.split("?", 1)[0].split("#", 1)[0]
    segments = [segment for segment in path.split("/") if segment]
    for index, segment in enumerate(segments):
        if VERSION_SEGMENT.match(segment):
            segments = segments[index + 1 :]
            break
    if not segments:
        return None
    stem, dot, _ = segments[-1].rpartition(".")
    if dot and stem:
        segments[-1] = stem
    return "/".join(segments)


def build_transformation(**options) -> str:
    """Joins the recognized transformation options, e.g. `w_100,h_50,c_fill`."""
    tokens = [
        f"{prefix}_{options[name]}"
        for name, prefix in TRANSFORMATION_PREFIXES
        if options.get(name)
    ]
    return ",".join(tokens)


def build_image_url(base_url: str, public_id: str, **options) -> str:
    transformation = build_transformation(**options)
    if public_id.startswith("/"):
        public_id = public_id[1:]
    if transformation:
        return f"{base_url}{transformation}/{public_id}"
    return f"{base_url}{public_id}"


def _read_upload_file(file: UploadFile) -> Union[bytes, str]:
    if isinstance(file, (bytes, str)):
        return file
    return file.read()


@dataclass
class CloudinaryClient:
    """
    Unsigned-upload client for a Cloudinary cloud.

    Deleting assets needs a signed request, so `delete_image` only works when
    an API key and secret are configured.
    """

    cloud_name: str
    upload_preset: str
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    api_base_url: str = API_BASE_URL
    delivery_base_url: str = DELIVERY_BASE_URL
    timeout: float = REQUEST_TIMEOUT

    @property
    def upload_url(self) -> str:
        return f"{self.api_base_url}{self.cloud_name}/image/upload"

    @property
    def image_base_url(self) -> str:
        return f"{self.delivery_base_url}{self.cloud_name}/image/upload/"

    def upload_image(
        self,
        file: UploadFile,
        *,
        filename: str = "upload",
        folder: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        public_id: Optional[str] = None,
    ) -> UploadResult:
        """
        Uploads a file with the unsigned upload preset.

        Args:
            file: Raw bytes, a binary file object, or a remote URL for
                Cloudinary to fetch.
            filename (str): Name sent with the multipart file part.
            folder (str): Optional destination folder.
            tags (list[str]): Optional tags, sent comma-joined.
            public_id (str): Optional public id for the asset.

        Returns:
            UploadResult: The hosted secure URL on success, or the error.
        """
        data = {"upload_preset": self.upload_preset}
        if folder:
            data["folder"] = folder
        if tags:
            data["tags"] = ",".join(tags)
        if public_id:
            data["public_id"] = public_id

        try:
            content = _read_upload_file(file)
            if isinstance(content, str):
                # Remote URLs are passed through for Cloudinary to fetch.
                response = requests.post(
                    self.upload_url,
                    data={**data, "file": content},
                    timeout=self.timeout,
                )
            else:
                response = requests.post(
                    self.upload_url,
                    data=data,
                    files={"file": (filename, content)},
                    timeout=self.timeout,
                )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError, OSError) as e:
            logger.exception("Error uploading image to Cloudinary")
            return UploadResult(success=False, error=str(e) or "Failed to upload image")

        return UploadResult(success=True, url=payload.get("secure_url"), data=payload)

    def get_image_url(self, public_id: str, **options) -> str:
        """
        Builds a delivery URL with transformation tokens.

        Recognized options are width, height, crop, quality, format and
        flags; tokens are emitted in that order.
        """
        return build_image_url(self.image_base_url, public_id, **options)

    def _signature(self, params: dict) -> str:
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    def delete_image(self, public_id: str) -> DeleteResult:
        if not (self.api_key and self.api_secret):
            return DeleteResult(
                success=False,
                error="Image deletion needs CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET",
            )
        params = {"public_id": public_id, "timestamp": int(time.time())}
        try:
            response = requests.post(
                f"{self.api_base_url}{self.cloud_name}/image/destroy",
                data={
                    **params,
                    "api_key": self.api_key,
                    "signature": self._signature(params),
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json().get("result")
        except (requests.RequestException, ValueError) as e:
            logger.exception("Error deleting image %s from Cloudinary", public_id)
            return DeleteResult(success=False, error=str(e) or "Failed to delete image")

        # Cloudinary answers "not found" for unknown ids; deletion is idempotent.
        if result not in ("ok", "not found"):
            return DeleteResult(success=False, error=f"Unexpected destroy result: {result}")
        return DeleteResult(success=True)


@dataclass
class InMemoryImageHost:
    """Test double that records uploads instead of sending them."""

    base_url: str = "https://example.test/demo/image/upload/"
    uploads: List[dict] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    fail_uploads: bool = False

    def reset(self) -> None:
        self.uploads.clear()
        self.deleted.clear()
        self.fail_uploads = False

    def upload_image(
        self,
        file: UploadFile,
        *,
        filename: str = "upload",
        folder: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        public_id: Optional[str] = None,
    ) -> UploadResult:
        if self.fail_uploads:
            return UploadResult(success=False, error="Upload rejected")
        asset_id = public_id or uuid.uuid4().hex[:20]
        if folder:
            asset_id = f"{folder}/{asset_id}"
        extension = filename.rpartition(".")[2] if "." in filename else "jpg"
        url = f"{self.base_url}v1/{asset_id}.{extension}"
        self.uploads.append(
            {
                "content": _read_upload_file(file),
                "filename": filename,
                "folder": folder,
                "tags": list(tags or []),
                "public_id": asset_id,
                "url": url,
            }
        )
        return UploadResult(
            success=True, url=url, data={"public_id": asset_id, "secure_url": url}
        )

    def get_image_url(self, public_id: str, **options) -> str:
        return build_image_url(self.base_url, public_id, **options)

    def delete_image(self, public_id: str) -> DeleteResult:
        self.deleted.append(public_id)
        return DeleteResult(success=True)
