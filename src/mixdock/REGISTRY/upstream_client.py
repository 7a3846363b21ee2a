# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
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

"""
Client for the upstream content server.
Retrieves release files, checksums and format information over HTTP(S).
"""

import logging
import os
import shutil
from typing import Tuple
from urllib.request import urlopen, Request
from urllib.error import HTTPError, URLError

from ..MODELS.builder_config import DEFAULT_UPSTREAM_URL
from ..MODELS.container_image import FormatRange
from ..errors import FetchError

logger = logging.getLogger(__name__)

HOST_FORMAT_FILE = "/usr/share/defaults/swupd/format"


class UpstreamClient:
    """
    Fetches files from an upstream base URL.
    """

    def __init__(self, base_url: str = DEFAULT_UPSTREAM_URL):
        """
        Initialize the upstream client.

        Args:
            base_url: URL that remote paths are joined to.
        """
        self.base_url = base_url.rstrip("/")

    def url_for(self, remote_path: str) -> str:
        """Join a remote path to the base URL."""
        return f"{self.base_url}/{remote_path.lstrip('/')}"

    def _open(self, remote_path: str):
        url = self.url_for(remote_path)
        logger.debug("Fetching %s", url)
        try:
            return urlopen(Request(url))
        except HTTPError as e:
            raise FetchError(url, f"HTTP {e.code}") from e
        except (URLError, OSError) as e:
            raise FetchError(url, str(getattr(e, "reason", e))) from e

    def fetch_bytes(self, remote_path: str) -> bytes:
        """
        Retrieve the content of a remote file.

        Args:
            remote_path: Path relative to the base URL

        Returns:
            File content
        """
        url = self.url_for(remote_path)
        with self._open(remote_path) as response:
            try:
                return response.read()
            except OSError as e:
                raise FetchError(url, str(e)) from e

    def fetch_text(self, remote_path: str) -> str:
        """Retrieve a remote file as text."""
        return self.fetch_bytes(remote_path).decode("utf-8")

    def download(self, remote_path: str, destination: str) -> None:
        """
        Download a remote file, overwriting ``destination``.

        Content is streamed to disk so large archives are not held in memory.
        """
        url = self.url_for(remote_path)
        with self._open(remote_path) as response:
            try:
                with open(destination, "wb") as f:
                    shutil.copyfileobj(response, f)
            except OSError as e:
                raise FetchError(url, str(e)) from e

    def get_upstream_format(self, version: str) -> str:
        """Get the format of an upstream release."""
        return self.fetch_text(f"/update/{version}/format").strip()

    def resolve_format_range(self, version: str) -> FormatRange:
        """
        Get the format of ``version`` and the first and latest releases sharing it.

        Args:
            version: Upstream release version

        Returns:
            FormatRange for the release
        """
        fmt = self.get_upstream_format(version)
        first = self.fetch_text(f"/update/version/format{fmt}/first").strip()
        latest = self.fetch_text(f"/update/version/format{fmt}/latest").strip()
        return FormatRange(format=fmt, first_version=first, latest_version=latest)

    def get_host_and_upstream_formats(
        self, version: str, host_format_file: str = HOST_FORMAT_FILE
    ) -> Tuple[str, str]:
        """
        Get the format of the host machine and of the upstream release.

        The host format is "" when the host has no format file.
        """
        try:
            with open(host_format_file, "r") as f:
                host_format = f.read().strip()
        except FileNotFoundError:
            host_format = ""

        return host_format, self.get_upstream_format(version)
