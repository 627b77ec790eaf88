import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from ocie_helper.core.errors import ValidationError
from ocie_helper.core.images import content_type_for, derive_key


def test_derive_key_lowercases_extension():
    assert derive_key("1234", "photo.JPG") == "1234.jpg"


def test_derive_key_discards_uploaded_name():
    assert derive_key("0042", "my.duffel.bag.webp") == "0042.webp"


@pytest.mark.parametrize("filename", ["photo.bmp", "photo", "", None, "archive.tar.gz"])
def test_derive_key_rejects_unsupported(filename):
    with pytest.raises(ValidationError) as info:
        derive_key("1234", filename)
    assert info.value.message == "unsupported image type"


def test_content_type_follows_extension():
    assert content_type_for("1234.png", "image/png") == "image/png"
    assert content_type_for("1234.jpg", "IMAGE/JPEG; charset=binary") == "image/jpeg"
    assert content_type_for("1234.jpeg", "application/octet-stream") == "image/jpeg"
    assert content_type_for("1234.gif") == "image/gif"


def test_content_type_ignores_mismatched_declaration():
    assert content_type_for("1234.png", "image/svg+xml") == "image/png"
    assert content_type_for("1234.webp", "text/html") == "image/webp"
