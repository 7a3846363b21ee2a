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
Shared fakes for the upstream server and the container runtime.
"""
import pytest
from mixdock.MODELS.container_image import FormatRange
from mixdock.errors import CommandError, FetchError


class FakeUpstream:
    """Serves text and archive files from dictionaries and records every call."""

    def __init__(self, texts=None, files=None):
        self.texts = dict(texts or {})
        self.files = dict(files or {})
        self.fetch_text_calls = []
        self.download_calls = []

    def fetch_text(self, remote_path):
        self.fetch_text_calls.append(remote_path)
        if remote_path not in self.texts:
            raise FetchError(remote_path, "HTTP 404")
        return self.texts[remote_path]

    def resolve_format_range(self, version):
        fmt = self.fetch_text(f"/update/{version}/format").strip()
        return FormatRange(
            format=fmt,
            first_version=self.fetch_text(f"/update/version/format{fmt}/first").strip(),
            latest_version=self.fetch_text(f"/update/version/format{fmt}/latest").strip(),
        )

    def download(self, remote_path, destination):
        self.download_calls.append((remote_path, destination))
        if remote_path not in self.files:
            raise FetchError(remote_path, "HTTP 404")
        with open(destination, "wb") as f:
            f.write(self.files[remote_path])


class FakeRuntime:
    """Stands in for ProcessRunner and records the commands it is given."""

    def __init__(self, images=(), fail_build=False, run_returncode=0):
        self.images = set(images)
        self.fail_build = fail_build
        self.run_returncode = run_returncode
        self.commands = []

    def run_output(self, command):
        self.commands.append(list(command))
        if command[1] == "images":
            return "4f2a9c1e0d3b\n" if command[-1] in self.images else ""
        return ""

    def run_silent(self, command):
        self.commands.append(list(command))
        if command[1] == "build":
            if self.fail_build:
                raise CommandError(command, 1, "build failed")
            self.images.add(command[command.index("-t") + 1])

    def run(self, command):
        self.commands.append(list(command))
        if self.run_returncode != 0:
            raise CommandError(command, self.run_returncode)

    def invocations(self, verb):
        return [c for c in self.commands if c[1] == verb]


@pytest.fixture
def fake_upstream():
    return FakeUpstream()


@pytest.fixture
def fake_runtime():
    return FakeRuntime()
