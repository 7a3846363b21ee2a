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
Helpers for turning arbitrary filesystem paths into bind-mount roots.
"""
import os
import stat
from typing import Iterable, List


def resolve_mount_root(path: str) -> str:
    """
    Returns the directory that must be mounted for ``path`` to be visible.

    Existing directories are returned as is and existing files yield their
    parent. Paths that do not exist yet (files a command will create, for
    instance) are walked up until an existing ancestor is found.

    Args:
        path: Filesystem path, which may not exist.

    Returns:
        The mount root, or "" when nothing needs to be mounted.
    """
    if not path:
        return ""
    path = os.path.normpath(path)

    while True:
        try:
            st = os.stat(path)
        except FileNotFoundError:
            parent = os.path.dirname(path)
            if parent == path:
                return ""
            path = parent
            continue
        except OSError:
            return ""

        if stat.S_ISDIR(st.st_mode):
            return path
        return os.path.dirname(path)


def reduce_mounts(paths: Iterable[str]) -> List[str]:
    """
    Reduces a collection of directories to a minimal, non-redundant list.

    If both "/foo" and "/foo/bar" are present, "/foo/bar" is dropped since
    mounting "/foo" already covers it. "/foobar" is kept alongside "/foo".
    Paths must have no trailing separator.

    Args:
        paths: Absolute directory paths.

    Returns:
        The sorted, reduced list. The input is not modified.
    """
    ordered = sorted(paths)
    if len(ordered) <= 1:
        return ordered

    # Sorting by components keeps each directory's descendants right after
    # it; plain string order puts "/a/b-x" between "/a/b" and "/a/b/c".
    reduced = []
    for path in sorted(ordered, key=lambda p: p.split(os.sep)):
        if reduced:
            last = reduced[-1]
            prefix = last if last.endswith(os.sep) else last + os.sep
            if path == last or path.startswith(prefix):
                continue
        reduced.append(path)
    return sorted(reduced)
