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
Runs a command inside the mixer container with the host paths it needs.
"""
import logging
import os
from enum import Enum
from typing import List, Optional

from ..BUILDERS.image_builder import ImageBuilder
from ..MODELS.builder_config import BuilderConfig
from ..REGISTRY.upstream_client import UpstreamClient
from ..UTILS.config_mounts import get_mounts
from ..errors import CommandError, ConfigError, ContainerRunError
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    """
    Progress of a single run_in_container call.
    """
    START = "start"
    FORMAT_RESOLVED = "format-resolved"
    IMAGE_ENSURED = "image-ensured"
    MOUNTS_COMPUTED = "mounts-computed"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def build_run_command(runtime: str,
                      image: str,
                      command: List[str],
                      mounts: List[str],
                      working_dir: str) -> List[str]:
    """
    Assembles the runtime invocation that runs ``command`` in ``image``.

    Each mount is bound at the same path inside the container, and
    ``command[0]`` replaces the image entrypoint.
    """
    run_cmd = [
        runtime,
        "run",
        "-i",
        "--network=host",
        "--rm",
        "--workdir", working_dir,
        "--entrypoint", command[0],
    ]
    for path in mounts:
        run_cmd.extend(["-v", f"{path}:{path}"])
    run_cmd.append(image)
    run_cmd.extend(command[1:])
    return run_cmd


class ContainerRunner:
    """
    Runs commands in a container built from the configured upstream release.
    """

    def __init__(self,
                 config: BuilderConfig,
                 upstream: UpstreamClient,
                 image_builder: ImageBuilder,
                 runner: Optional[ProcessRunner] = None,
                 working_dir: Optional[str] = None,
                 runtime: str = "docker"):
        """
        Args:
            config: Build configuration; its path fields decide the mounts.
            upstream: Resolves the format of the configured upstream version.
            image_builder: Ensures the image for that format exists.
            runner: Executes the container runtime.
            working_dir: Directory the command runs in. Defaults to the current directory.
            runtime: Container runtime executable.
        """
        self.config = config
        self.upstream = upstream
        self.image_builder = image_builder
        self.runner = runner or ProcessRunner()
        self.working_dir = os.path.abspath(working_dir or os.getcwd())
        self.runtime = runtime
        self.state = RunState.START

    def run_in_container(self, command: List[str]) -> None:
        """
        Pulls the content needed to build the image, builds it if missing,
        and runs ``command`` in it. Output goes straight to this process's
        stdout and stderr.

        Raises:
            ValueError: If ``command`` is empty.
            MixdockError: On the first failing step. Nothing is retried.
        """
        if not command:
            raise ValueError("No command given to run in container")

        self.state = RunState.START
        try:
            self._run(command)
        except Exception:
            self.state = RunState.FAILED
            raise
        self.state = RunState.SUCCEEDED

    def _run(self, command: List[str]) -> None:
        version = self.config.upstream.version
        if not version:
            raise ConfigError("No upstream version configured")

        format_range = self.upstream.resolve_format_range(version)
        self.state = RunState.FORMAT_RESOLVED

        image = self.image_builder.ensure_image(format_range.format, format_range.first_version)
        self.state = RunState.IMAGE_ENSURED

        mounts = get_mounts(self.config, self.working_dir)
        self.state = RunState.MOUNTS_COMPUTED

        logger.info("Running command in container: %s", command)
        run_cmd = build_run_command(self.runtime, image, command, mounts, self.working_dir)
        self.state = RunState.RUNNING
        try:
            self.runner.run(run_cmd)
        except CommandError as e:
            raise ContainerRunError("Failed to run command in container") from e
