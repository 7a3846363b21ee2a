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
Exceptions raised by mixdock.

Every error wraps the operation that failed; the original cause is kept
as ``__cause__``.
"""
from typing import List, Optional


class MixdockError(Exception):
    """Base class for all mixdock errors."""


class ConfigError(MixdockError):
    """The build configuration could not be read or validated."""


class FetchError(MixdockError):
    """A file could not be retrieved from the upstream server."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"Failed to fetch {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class BaseArchiveError(MixdockError):
    """The image base archive could not be obtained."""

    def __init__(self, version: str, destination: str):
        self.version = version
        self.destination = destination
        super().__init__(
            f"Failed to download docker image base for ver {version} to {destination}"
        )


class ImageBuildError(MixdockError):
    """
    Ensuring the container image failed.

    ``phase`` is one of ``"check"``, ``"workdir"``, ``"fetch"``,
    ``"dockerfile"`` or ``"build"``.
    """

    def __init__(self, phase: str, message: str):
        self.phase = phase
        super().__init__(message)


class CommandError(MixdockError):
    """An external command failed to start or exited non-zero."""

    def __init__(self, command: List[str], returncode: Optional[int], output: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        if returncode is None:
            message = f"Failed to execute {' '.join(self.command)}"
        else:
            message = f"Command {' '.join(self.command)} exited with status {returncode}"
        if output:
            message += f"\n{output.rstrip()}"
        super().__init__(message)


class ContainerRunError(MixdockError):
    """The command could not be run inside the container."""


def format_error_chain(err: BaseException) -> str:
    """Returns the messages of ``err`` and its causes, outermost first."""
    messages = []
    seen = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        text = str(err) or type(err).__name__
        messages.append(text)
        err = err.__cause__
    return ": ".join(messages)
