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
Execution of external commands, either streaming or capturing their output.
"""
import logging
import subprocess
from typing import List

from ..errors import CommandError

logger = logging.getLogger(__name__)

class ProcessRunner:
    """
    Runs external commands and turns failures into CommandError.
    """
    def run(self, command: List[str]) -> None:
        """
        Runs a command with stdin, stdout and stderr inherited from this process.

        Args:
            command (List[str]): Command and arguments to execute.

        Raises:
            CommandError: If the command cannot be started or exits non-zero.
        """
        logger.debug("Running: %s", " ".join(command))
        try:
            # Avoid shell=True for security reasons (CWE-78)
            completed = subprocess.run(command, shell=False)
        except OSError as e:
            raise CommandError(command, None) from e
        if completed.returncode != 0:
            raise CommandError(command, completed.returncode)

    def run_output(self, command: List[str]) -> str:
        """
        Runs a command and returns its standard output.

        Args:
            command (List[str]): Command and arguments to execute.

        Returns:
            str: Captured stdout.

        Raises:
            CommandError: If the command cannot be started or exits non-zero.
                Captured stderr is included in the error.
        """
        logger.debug("Running: %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                shell=False
            )
        except OSError as e:
            raise CommandError(command, None) from e
        if completed.returncode != 0:
            raise CommandError(command, completed.returncode, completed.stderr)
        return completed.stdout

    def run_silent(self, command: List[str]) -> None:
        """
        Runs a command, discarding its output unless it fails.

        Args:
            command (List[str]): Command and arguments to execute.

        Raises:
            CommandError: If the command cannot be started or exits non-zero.
                Combined stdout and stderr is included in the error.
        """
        logger.debug("Running: %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                shell=False
            )
        except OSError as e:
            raise CommandError(command, None) from e
        if completed.returncode != 0:
            raise CommandError(command, completed.returncode, completed.stdout)
