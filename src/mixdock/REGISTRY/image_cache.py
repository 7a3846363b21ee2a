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
Local cache of the image base archive.
Reuses a previously downloaded archive while its checksum still matches upstream.
"""

import hashlib
import logging
import os
from typing import Optional

from ..MODELS.container_image import BaseArchive
from ..errors import BaseArchiveError, FetchError
from .upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "mixer.tar.xz"
CHUNK_SIZE = 1024 * 1024


def file_digest(path: str) -> str:
    """
    Calculate the hex SHA-512 digest of a file.

    Returns "" if the file cannot be read.
    """
    digest = hashlib.sha512()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError:
        return ""
    return digest.hexdigest()


class BaseArchiveCache:
    """
    Keeps the mixer base archive for a release in a working directory.
    """

    def __init__(self, upstream: UpstreamClient):
        """
        Initialize the cache.

        Args:
            upstream: Client used for checksum and archive downloads.
        """
        self.upstream = upstream

    @staticmethod
    def remote_archive_path(version: str) -> str:
        """Path of the mixer archive for ``version`` on the upstream server."""
        return f"/releases/{version}/clear/clear-{version}-mixer.tar.xz"

    def published_digest(self, version: str) -> Optional[str]:
        """
        Get the digest upstream publishes for the archive.

        Returns None if the checksum file cannot be fetched.
        """
        try:
            text = self.upstream.fetch_text(self.remote_archive_path(version) + "-SHA512SUMS")
        except FetchError as e:
            logger.warning("Could not fetch checksum for version %s: %s", version, e)
            return None
        fields = text.split()
        return fields[0] if fields else None

    def ensure_base_archive(self, version: str, dest_dir: str) -> BaseArchive:
        """
        Make sure a valid base archive for ``version`` is in ``dest_dir``.

        An existing archive is reused only if its digest matches the published
        one; otherwise the archive is downloaded again.

        Args:
            version: Upstream release version
            dest_dir: Existing directory to store the archive in

        Returns:
            BaseArchive describing the file
        """
        filename = os.path.join(dest_dir, ARCHIVE_NAME)

        if os.path.exists(filename):
            expected = self.published_digest(version)
            if expected is not None:
                actual = file_digest(filename)
                if actual == expected:
                    logger.info("Using cached image base %s", filename)
                    return BaseArchive(path=filename, digest=actual, version=version, downloaded=False)
                logger.info("Cached image base %s does not match upstream checksum", filename)

        logger.info("Downloading image from upstream...")
        try:
            self.upstream.download(self.remote_archive_path(version), filename)
        except FetchError as e:
            raise BaseArchiveError(version, filename) from e

        return BaseArchive(path=filename, digest=file_digest(filename), version=version, downloaded=True)
