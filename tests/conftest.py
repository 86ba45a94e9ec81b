"""
Shared test fixtures for kirigami generation tests.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from design_config import Algorithm, DesignConfig, PaperSize, RasterImage
from kirigami_engine import generate_kirigami_geometry


@pytest.fixture
def default_config():
    """The application's default design (sphere, 31 x 12 on A4)."""
    return DesignConfig()


@pytest.fixture
def stairs_config():
    """Three columns, two rows, fully folded stairs: one active strip."""
    return DesignConfig(
        algorithm=Algorithm.STAIRS,
        cols=3,
        rows=2,
        amplitude=50.0,
        fold_progress=1.0,
        thickness=0.2,
    )


@pytest.fixture
def stairs_geometry(stairs_config):
    return generate_kirigami_geometry(stairs_config)


@pytest.fixture
def small_config():
    """A quick sphere design for pipeline/export tests."""
    return DesignConfig(algorithm=Algorithm.SPHERE, cols=7, rows=3)


@pytest.fixture
def square_paper():
    """200 x 200 mm sheet with a 10 mm margin."""
    return PaperSize(width=200.0, height=200.0, margin=10.0)


@pytest.fixture
def gradient_raster():
    """4 x 3 raster; the middle row runs black -> white left to right."""
    width, height = 4, 3
    data = []
    for row in range(height):
        for col in range(width):
            if row == 1:
                v = int(round(col * 255 / (width - 1)))
            else:
                v = 128
            data.extend([v, v, v, 255])
    return RasterImage.from_rgba(width, height, data)
