from __future__ import annotations

import pytest

from tests.helpers import idat_chunk, iend_chunk, ihdr_chunk, make_png


@pytest.fixture
def minimal_png() -> bytes:
    return make_png(ihdr_chunk(), idat_chunk(), iend_chunk())


@pytest.fixture
def png_file(tmp_path, minimal_png):
    path = tmp_path / "card.png"
    path.write_bytes(minimal_png)
    return path
