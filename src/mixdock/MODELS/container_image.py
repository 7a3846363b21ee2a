"""
Models representing the mixer container image and its inputs.
"""
from dataclasses import dataclass
from pydantic import BaseModel

class FormatRange(BaseModel):
    """
    The range of upstream versions sharing one format.
    """
    format: str
    first_version: str
    latest_version: str

@dataclass
class BaseArchive:
    """
    The root filesystem seed an image is built from.
    """
    path: str
    digest: str
    version: str
    downloaded: bool
