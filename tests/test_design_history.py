"""Tests for design_history module."""
import pytest

from design_config import Algorithm, DesignConfig, RasterImage
from design_history import DEFAULT_MAX_ENTRIES, DesignHistory


def config_with_cols(cols):
    return DesignConfig(cols=cols)


class TestDesignHistory:
    """Bounded linear undo."""

    def test_starts_at_initial(self):
        initial = config_with_cols(5)
        history = DesignHistory(initial)
        assert history.current == initial
        assert len(history) == 1
        assert not history.can_undo()

    def test_default_initial(self):
        assert DesignHistory().current == DesignConfig()

    def test_commit_and_undo(self):
        history = DesignHistory(config_with_cols(1))
        history.commit(config_with_cols(2))
        history.commit(config_with_cols(3))
        assert len(history) == 3
        assert history.undo().cols == 2
        assert history.undo().cols == 1
        assert not history.can_undo()

    def test_undo_at_oldest_stays(self):
        history = DesignHistory(config_with_cols(1))
        assert history.undo().cols == 1
        assert history.current.cols == 1

    def test_commit_after_undo_drops_redo_tail(self):
        history = DesignHistory(config_with_cols(1))
        history.commit(config_with_cols(2))
        history.undo()
        history.commit(config_with_cols(3))
        assert len(history) == 2
        assert history.undo().cols == 1

    def test_identical_commit_ignored(self):
        history = DesignHistory(config_with_cols(1))
        history.commit(config_with_cols(1))
        assert len(history) == 1

    def test_bounded(self):
        history = DesignHistory(config_with_cols(0))
        for cols in range(1, 26):
            history.commit(config_with_cols(cols))
        assert len(history) == DEFAULT_MAX_ENTRIES == 20
        while history.can_undo():
            history.undo()
        assert history.current.cols == 6

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            DesignHistory(max_entries=0)

    def test_new_image_of_same_size_is_committed(self):
        black = RasterImage.from_rgba(2, 1, [0, 0, 0, 255] * 2)
        white = RasterImage.from_rgba(2, 1, [255, 255, 255, 255] * 2)
        history = DesignHistory(DesignConfig(algorithm=Algorithm.IMAGE, raster=black))

        history.commit(DesignConfig(algorithm=Algorithm.IMAGE, raster=white))

        assert history.current.raster is white
        assert len(history) == 2
        assert history.undo().raster is black

    def test_same_image_content_is_ignored(self):
        pixels = [10, 20, 30, 255] * 2
        history = DesignHistory(DesignConfig(raster=RasterImage.from_rgba(2, 1, pixels)))
        history.commit(DesignConfig(raster=RasterImage.from_rgba(2, 1, pixels)))
        assert len(history) == 1
