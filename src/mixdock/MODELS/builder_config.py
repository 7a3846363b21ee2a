"""
Models for the mixer build configuration.
"""
from typing import ClassVar, Iterator, Tuple
from pydantic import BaseModel, Field

DEFAULT_UPSTREAM_URL = "https://cdn.download.clearlinux.org"

class BuilderSection(BaseModel):
    """
    Paths used by the builder while producing update content.
    """
    server_state_dir: str = ""
    bundle_dir: str = ""
    yum_conf: str = ""
    cert: str = ""
    versions_path: str = ""
    dnf_cache_dir: str = ""

class MixerSection(BaseModel):
    """
    Local content directories mixed into the build.
    """
    local_bundle_dir: str = ""
    local_rpm_dir: str = ""
    local_repo_dir: str = ""

class UpstreamSection(BaseModel):
    """
    The upstream release being mirrored.
    """
    url: str = DEFAULT_UPSTREAM_URL
    version: str = ""

class BuilderConfig(BaseModel):
    """
    Complete build configuration, equivalent to a parsed builder.yaml file.
    """
    builder: BuilderSection = Field(default_factory=BuilderSection)
    mixer: MixerSection = Field(default_factory=MixerSection)
    upstream: UpstreamSection = Field(default_factory=UpstreamSection)

    # Every configuration field that holds a filesystem path. Fields added
    # to the sections above must be listed here to be mounted.
    PATH_FIELDS: ClassVar[Tuple[Tuple[str, str], ...]] = (
        ("builder", "server_state_dir"),
        ("builder", "bundle_dir"),
        ("builder", "yum_conf"),
        ("builder", "cert"),
        ("builder", "versions_path"),
        ("builder", "dnf_cache_dir"),
        ("mixer", "local_bundle_dir"),
        ("mixer", "local_rpm_dir"),
        ("mixer", "local_repo_dir"),
    )

    def path_values(self) -> Iterator[Tuple[str, str]]:
        """
        Yields ``(name, value)`` for each path-valued field, in declaration order.
        """
        for section, field in self.PATH_FIELDS:
            yield f"{section}.{field}", getattr(getattr(self, section), field)
