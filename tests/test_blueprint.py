"""Tests for blueprint lines and fold classification."""
import pytest

from blueprint import (
    BlueprintLine,
    LineType,
    SegmentOrientation,
    classify_joint,
    fixed_strip_lines,
    fold_line,
    paper_outline_lines,
    strip_cut_lines,
    total_length,
)
from design_config import PAPER_A4

H = SegmentOrientation.HORIZONTAL
V = SegmentOrientation.VERTICAL


class TestClassifyJoint:
    """Fold type from the orientations either side of a joint."""

    def test_tread_into_riser_is_valley(self):
        assert classify_joint(H, V) is LineType.VALLEY

    def test_riser_into_tread_is_mountain(self):
        assert classify_joint(V, H) is LineType.MOUNTAIN

    @pytest.mark.parametrize("orientation", [H, V])
    def test_coplanar_joint_has_no_line(self, orientation):
        assert classify_joint(orientation, orientation) is None


class TestBlueprintLine:
    """Line value object."""

    def test_length(self):
        assert BlueprintLine(0, 0, 3, 4, LineType.CUT).length == pytest.approx(5.0)

    def test_is_fold(self):
        assert BlueprintLine(0, 0, 1, 0, LineType.MOUNTAIN).is_fold
        assert BlueprintLine(0, 0, 1, 0, LineType.VALLEY).is_fold
        assert not BlueprintLine(0, 0, 1, 0, LineType.CUT).is_fold
        assert not BlueprintLine(0, 0, 1, 0, LineType.SPINE).is_fold

    def test_frozen(self):
        line = BlueprintLine(0, 0, 1, 0, LineType.CUT)
        with pytest.raises(AttributeError):
            line.x1 = 2.0


class TestLineBuilders:
    """Per-strip line sets."""

    def test_fold_line_spans_strip(self):
        line = fold_line(-2.0, 3.0, 10.0, LineType.VALLEY)
        assert (line.x1, line.y1, line.x2, line.y2) == (-2.0, 10.0, 3.0, 10.0)

    def test_cut_lines_full_height(self):
        cuts = strip_cut_lines(1.0, 4.0, PAPER_A4)
        assert len(cuts) == 2
        for cut, x in zip(cuts, (1.0, 4.0)):
            assert cut.type is LineType.CUT
            assert cut.x1 == cut.x2 == x
            assert cut.y1 == pytest.approx(-148.5)
            assert cut.y2 == pytest.approx(148.5)

    def test_fixed_strip_lines(self):
        lines = fixed_strip_lines(1.0, 4.0, PAPER_A4)
        spines = [l for l in lines if l.type is LineType.SPINE]
        valleys = [l for l in lines if l.type is LineType.VALLEY]
        assert len(spines) == 4
        assert len(valleys) == 1
        assert valleys[0].y1 == valleys[0].y2 == 0.0
        assert total_length(lines, LineType.SPINE) == pytest.approx(2 * 297.0)

    def test_paper_outline_perimeter(self):
        outline = paper_outline_lines(PAPER_A4)
        assert len(outline) == 4
        assert all(l.type is LineType.OUTLINE for l in outline)
        assert total_length(outline, LineType.OUTLINE) == pytest.approx(2 * (210.0 + 297.0))

    def test_total_length_filters_types(self):
        lines = [
            BlueprintLine(0, 0, 10, 0, LineType.CUT),
            BlueprintLine(0, 0, 0, 5, LineType.MOUNTAIN),
            BlueprintLine(0, 0, 0, 2, LineType.VALLEY),
        ]
        assert total_length(lines, LineType.CUT) == pytest.approx(10.0)
        assert total_length(lines, LineType.MOUNTAIN, LineType.VALLEY) == pytest.approx(7.0)
        assert total_length(lines) == 0.0
