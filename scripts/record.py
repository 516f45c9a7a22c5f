"""The in-progress pledge: what the user has confirmed so far."""

from dataclasses import dataclass
from typing import Optional

from PIL import Image

REQUIRED_FIELDS = ("name", "photo", "signature")


@dataclass
class PledgeRecord:
    name: str = ""
    photo: Optional[Image.Image] = None
    signature: Optional[Image.Image] = None
    generated_certificate: Optional[bytes] = None

    def missing_fields(self):
        missing = []
        if not self.name.strip():
            missing.append("name")
        if self.photo is None:
            missing.append("photo")
        if self.signature is None:
            missing.append("signature")
        return missing

    def clear(self):
        self.name = ""
        self.photo = None
        self.signature = None
        self.generated_certificate = None
