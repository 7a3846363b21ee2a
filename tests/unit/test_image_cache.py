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
Unit tests for the base archive cache.
"""
import hashlib
import pytest
from mixdock.REGISTRY.image_cache import ARCHIVE_NAME, BaseArchiveCache, file_digest
from mixdock.errors import BaseArchiveError, FetchError

VERSION = "30010"
REMOTE = "/releases/30010/clear/clear-30010-mixer.tar.xz"
ARCHIVE = b"fake mixer rootfs archive"


def sums_line(data):
    return f"{hashlib.sha512(data).hexdigest()}  clear-{VERSION}-mixer.tar.xz\n"


class TestFileDigest:
    """Tests for file_digest."""

    def test_digest(self, tmp_path):
        """Test the SHA-512 of a file's bytes."""
        path = tmp_path / "f"
        path.write_bytes(ARCHIVE)
        assert file_digest(str(path)) == hashlib.sha512(ARCHIVE).hexdigest()

    def test_missing_file(self, tmp_path):
        """Test that an unreadable file has an empty digest."""
        assert file_digest(str(tmp_path / "missing")) == ""


class TestEnsureBaseArchive:
    """Tests for BaseArchiveCache.ensure_base_archive."""

    def test_remote_path(self):
        """Test the upstream location of the archive."""
        assert BaseArchiveCache.remote_archive_path(VERSION) == REMOTE

    def test_cache_hit_skips_download(self, tmp_path, fake_upstream):
        """Test that a matching local archive is reused without downloading."""
        (tmp_path / ARCHIVE_NAME).write_bytes(ARCHIVE)
        fake_upstream.texts[REMOTE + "-SHA512SUMS"] = sums_line(ARCHIVE)

        archive = BaseArchiveCache(fake_upstream).ensure_base_archive(VERSION, str(tmp_path))

        assert fake_upstream.download_calls == []
        assert archive.downloaded is False
        assert archive.path == str(tmp_path / ARCHIVE_NAME)
        assert archive.digest == hashlib.sha512(ARCHIVE).hexdigest()

    def test_mismatch_downloads_once(self, tmp_path, fake_upstream):
        """Test that a stale archive is downloaded again and overwritten."""
        (tmp_path / ARCHIVE_NAME).write_bytes(b"stale")
        fake_upstream.texts[REMOTE + "-SHA512SUMS"] = sums_line(ARCHIVE)
        fake_upstream.files[REMOTE] = ARCHIVE

        archive = BaseArchiveCache(fake_upstream).ensure_base_archive(VERSION, str(tmp_path))

        assert len(fake_upstream.download_calls) == 1
        assert (tmp_path / ARCHIVE_NAME).read_bytes() == ARCHIVE
        assert archive.downloaded is True

    def test_checksum_failure_downloads_once(self, tmp_path, fake_upstream):
        """Test that an unavailable checksum forces one download."""
        (tmp_path / ARCHIVE_NAME).write_bytes(ARCHIVE)
        fake_upstream.files[REMOTE] = ARCHIVE

        BaseArchiveCache(fake_upstream).ensure_base_archive(VERSION, str(tmp_path))

        assert fake_upstream.download_calls == [(REMOTE, str(tmp_path / ARCHIVE_NAME))]

    def test_absent_file_skips_checksum(self, tmp_path, fake_upstream):
        """Test that no checksum is fetched when there is no local archive."""
        fake_upstream.files[REMOTE] = ARCHIVE

        archive = BaseArchiveCache(fake_upstream).ensure_base_archive(VERSION, str(tmp_path))

        assert fake_upstream.fetch_text_calls == []
        assert len(fake_upstream.download_calls) == 1
        assert archive.digest == hashlib.sha512(ARCHIVE).hexdigest()

    def test_download_failure_is_wrapped(self, tmp_path, fake_upstream):
        """Test that a failed download names the version and destination."""
        with pytest.raises(BaseArchiveError) as excinfo:
            BaseArchiveCache(fake_upstream).ensure_base_archive(VERSION, str(tmp_path))

        assert excinfo.value.version == VERSION
        assert excinfo.value.destination == str(tmp_path / ARCHIVE_NAME)
        assert isinstance(excinfo.value.__cause__, FetchError)
        assert VERSION in str(excinfo.value)
