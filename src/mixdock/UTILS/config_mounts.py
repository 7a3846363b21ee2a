"""
Computation of the bind mounts needed to run a build in a container.
"""
import logging
import os
from typing import List
from ..MODELS.builder_config import BuilderConfig
from .mount_paths import reduce_mounts, resolve_mount_root

logger = logging.getLogger(__name__)

def get_mounts(config: BuilderConfig, working_dir: str) -> List[str]:
    """
    Returns the minimal list of directories from ``config`` that need to be
    mounted inside the container. The working directory is always included.

    :param config: The build configuration.
    :param working_dir: Absolute path of the directory the command runs in.
    :return: Sorted mount roots, none nested inside another.
    """
    mounts = {os.path.normpath(working_dir)}

    for name, value in config.path_values():
        root = resolve_mount_root(value)
        if not os.path.isabs(root):
            continue
        logger.debug("Mount for %s (%s): %s", name, value, root)
        mounts.add(root)

    return reduce_mounts(mounts)
