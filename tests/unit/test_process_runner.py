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
Unit tests for ProcessRunner, using the running interpreter as the command.
"""
import sys
import pytest
from mixdock.RUNNERS.process_runner import ProcessRunner
from mixdock.errors import CommandError


def py(code):
    return [sys.executable, "-c", code]


def test_run_output():
    """Test capturing standard output."""
    assert ProcessRunner().run_output(py("print('abc')")) == "abc\n"


def test_run_output_failure_includes_stderr():
    """Test that stderr ends up in the error message."""
    with pytest.raises(CommandError) as excinfo:
        ProcessRunner().run_output(py("import sys; sys.stderr.write('boom'); sys.exit(3)"))
    assert excinfo.value.returncode == 3
    assert "boom" in str(excinfo.value)


def test_run_success():
    """Test a streamed command that exits zero."""
    ProcessRunner().run(py("pass"))


def test_run_failure():
    """Test that a streamed command's exit status is reported."""
    with pytest.raises(CommandError) as excinfo:
        ProcessRunner().run(py("import sys; sys.exit(1)"))
    assert excinfo.value.returncode == 1


def test_run_silent_failure_includes_output():
    """Test that hidden output is kept on failure."""
    with pytest.raises(CommandError) as excinfo:
        ProcessRunner().run_silent(py("print('step 1/3'); raise SystemExit(4)"))
    assert "step 1/3" in excinfo.value.output


def test_missing_executable():
    """Test that a command that cannot start has no return code."""
    with pytest.raises(CommandError) as excinfo:
        ProcessRunner().run(["mixdock-no-such-binary"])
    assert excinfo.value.returncode is None


def test_no_shell_interpretation(tmp_path):
    """Test that shell operators are passed as literal arguments."""
    marker = tmp_path / "injected"
    ProcessRunner().run_output(py("import sys; print(sys.argv)") + [";", "touch", str(marker)])
    assert not marker.exists()
