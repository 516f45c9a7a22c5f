"""Tests for certificate naming and export."""

import io

import pytest
from PIL import Image
from pypdf import PdfReader

from campaigns import ARTHRITIS, CFS
from export import certificate_to_pdf, download_filename, write_certificate


def jpeg_bytes(size=(300, 200)):
    buf = io.BytesIO()
    Image.new("RGB", size, (40, 80, 120)).save(buf, "JPEG", quality=92)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Download names
# ---------------------------------------------------------------------------

class TestDownloadFilename:
    @pytest.mark.parametrize("name,expected", [
        ("Jane Doe", "Arthritis_Pledge_Certificate_Jane_Doe.jpg"),
        ("Jane   Doe", "Arthritis_Pledge_Certificate_Jane_Doe.jpg"),
        ("Jane\tDoe", "Arthritis_Pledge_Certificate_Jane_Doe.jpg"),
        ("O'Brien, Pat", "Arthritis_Pledge_Certificate_O_Brien_Pat.jpg"),
        ("../etc/passwd", "Arthritis_Pledge_Certificate_etc_passwd.jpg"),
        ("Zoë Ångström", "Arthritis_Pledge_Certificate_Zoë_Ångström.jpg"),
    ])
    def test_separators_collapse(self, name, expected):
        assert download_filename(name, ARTHRITIS) == expected

    def test_blank_name_uses_prefix(self):
        assert download_filename("", ARTHRITIS) == "Arthritis_Pledge_Certificate.jpg"
        assert download_filename(" !! ", ARTHRITIS) == "Arthritis_Pledge_Certificate.jpg"

    def test_campaign_prefix(self):
        assert download_filename("Jane Doe", CFS) == "CFS_Pledge_Certificate_Jane_Doe.jpg"


# ---------------------------------------------------------------------------
# Writing files
# ---------------------------------------------------------------------------

class TestWrite:
    def test_write_certificate(self, tmp_path):
        data = jpeg_bytes()
        path = write_certificate(data, tmp_path / "nested", "Jane Doe", ARTHRITIS)
        assert path.parent == tmp_path / "nested"
        assert path.name == "Arthritis_Pledge_Certificate_Jane_Doe.jpg"
        assert path.read_bytes() == data

    def test_pdf_page_matches_image(self, tmp_path):
        output = certificate_to_pdf(jpeg_bytes((300, 200)), tmp_path / "certificate.pdf")
        reader = PdfReader(str(output))
        assert len(reader.pages) == 1
        box = reader.pages[0].mediabox
        assert float(box.width) == pytest.approx(300)
        assert float(box.height) == pytest.approx(200)
