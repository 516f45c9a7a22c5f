"""Download naming and file export for generated certificates."""

import io
import re
from pathlib import Path

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

_SEPARATOR_RUN = re.compile(r"[\W_]+")


def download_filename(name, campaign):
    """File name for a certificate: "<prefix>_<Name_With_Separators>.jpg".

    Runs of anything other than letters and digits (spaces, punctuation,
    underscores) collapse to one "_".
    """
    slug = _SEPARATOR_RUN.sub("_", name).strip("_")
    stem = f"{campaign.file_prefix}_{slug}" if slug else campaign.file_prefix
    return stem + campaign.file_extension


def write_certificate(data, directory, name, campaign):
    """Write certificate bytes under its download name and return the path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / download_filename(name, campaign)
    path.write_bytes(data)
    return path


def certificate_to_pdf(data, output_path):
    """Wrap an encoded certificate in a single-page PDF sized to the image.

    One image pixel maps to one PDF point.
    """
    with Image.open(io.BytesIO(data)) as image:
        width, height = image.size

    c = canvas.Canvas(str(output_path), pagesize=(width, height))
    c.drawImage(ImageReader(io.BytesIO(data)), 0, 0, width=width, height=height)
    c.showPage()
    c.save()
    return Path(output_path)
