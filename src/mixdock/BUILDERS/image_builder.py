"""
Builder for the mixer container image.
"""
import logging
import os
from typing import Optional
from jinja2 import Template
from ..REGISTRY.image_cache import ARCHIVE_NAME, BaseArchiveCache
from ..RUNNERS.process_runner import ProcessRunner
from ..errors import CommandError, ImageBuildError, MixdockError

logger = logging.getLogger(__name__)

IMAGE_NAMESPACE = "mixer-tools/mixer"

DOCKERFILE_TEMPLATE = """FROM scratch
ADD {{ archive_name }} /
RUN clrtrust generate
CMD ["/bin/bash"]
"""

def image_name(fmt: str) -> str:
    """
    Returns the name of the image for a format.
    """
    return f"{IMAGE_NAMESPACE}:{fmt}"

def render_dockerfile(archive_name: str = ARCHIVE_NAME) -> str:
    """
    Returns the Dockerfile content for an image seeded from ``archive_name``.
    """
    template = Template(DOCKERFILE_TEMPLATE, keep_trailing_newline=True)
    return template.render(archive_name=archive_name)

class ImageBuilder:
    """
    Ensures a container image exists for an upstream format, building it
    from the upstream base archive when it does not.
    """
    def __init__(self,
                 archive_cache: BaseArchiveCache,
                 runner: Optional[ProcessRunner] = None,
                 base_dir: str = ".",
                 runtime: str = "docker"):
        """
        Initializes the ImageBuilder.

        :param archive_cache: Provides the base archive for a version.
        :param runner: Executes container runtime commands.
        :param base_dir: Directory under which per-format build directories are created.
        :param runtime: Container runtime executable.
        """
        self.archive_cache = archive_cache
        self.runner = runner or ProcessRunner()
        self.base_dir = os.path.abspath(base_dir)
        self.runtime = runtime

    def work_dir(self, fmt: str) -> str:
        """
        Returns the build directory for a format.
        """
        return os.path.join(self.base_dir, "docker", f"mixer-{fmt}")

    def image_exists(self, name: str) -> bool:
        """
        Asks the runtime whether an image called ``name`` is present.
        """
        try:
            output = self.runner.run_output([self.runtime, "images", "-q", name])
        except CommandError as e:
            raise ImageBuildError("check", f"Error checking for docker image {name!r}") from e
        return output.strip() != ""

    def write_dockerfile(self, directory: str, archive_name: str = ARCHIVE_NAME) -> str:
        """
        Writes the Dockerfile into ``directory``.

        :return: Path of the Dockerfile.
        """
        filename = os.path.join(directory, "Dockerfile")
        try:
            with open(filename, 'w') as f:
                f.write(render_dockerfile(archive_name))
        except OSError as e:
            raise ImageBuildError("dockerfile", "Failed to create Dockerfile") from e
        return filename

    def ensure_image(self, fmt: str, version: str) -> str:
        """
        Makes sure the image for ``fmt`` exists, building it from the base
        archive of ``version`` otherwise.

        The build directory is kept after the build, whether it succeeded or not.

        :param fmt: Upstream format the image is built for.
        :param version: Upstream version whose base archive seeds the image.
        :return: The image name.
        """
        name = image_name(fmt)
        # TODO: verify the existing image (e.g. content trust) instead of trusting its name
        if self.image_exists(name):
            logger.debug("Image %s already exists", name)
            return name

        docker_root = self.work_dir(fmt)
        try:
            os.makedirs(docker_root, exist_ok=True)
        except OSError as e:
            raise ImageBuildError("workdir", f"Failed to generate docker work dir: {docker_root}") from e

        try:
            archive = self.archive_cache.ensure_base_archive(version, docker_root)
        except MixdockError as e:
            raise ImageBuildError("fetch", "Error fetching Docker image base") from e

        self.write_dockerfile(docker_root, os.path.basename(archive.path))

        logger.info("Building Docker image...")
        command = [self.runtime, "build", "-t", name, "--rm", docker_root]
        try:
            self.runner.run_silent(command)
        except CommandError as e:
            raise ImageBuildError("build", "Failed to build Docker image") from e

        return name
