"""Tests for grid rectangle transforms."""
import pytest

from canvasstate import InvalidRectError, move, offset_by, resize, validate_rect


class TestValidateRect:

    def test_accepts_list(self):
        assert validate_rect([1, 2, 3, 4]) == (1, 2, 3, 4)

    @pytest.mark.parametrize("rect", [
        (0, 0, 0, 1),
        (0, 0, 1, 0),
        (-1, 0, 1, 1),
        (0, -1, 1, 1),
        (0, 0, 1),
        (0, 0, 1.5, 1),
        (0, 0, True, 1),
        None,
    ])
    def test_rejects_invalid(self, rect):
        with pytest.raises(InvalidRectError):
            validate_rect(rect)

    def test_invalid_rect_is_value_error(self):
        with pytest.raises(ValueError):
            validate_rect((0, 0, 0, 0))


class TestMove:

    def test_offsets_origin_only(self):
        assert move((2, 3, 8, 3), (1, 1)) == (3, 4, 8, 3)

    def test_does_not_mutate_input(self):
        rect = [2, 3, 8, 3]
        move(rect, (1, 1))
        assert rect == [2, 3, 8, 3]

    def test_moving_off_grid_fails(self):
        with pytest.raises(InvalidRectError):
            move((0, 0, 1, 1), (-1, 0))

    def test_offset_by_builds_transform(self):
        assert offset_by((1, 1))((0, 0, 8, 3)) == (1, 1, 8, 3)


def test_resize_keeps_origin():
    assert resize((1, 1, 2, 2), (3, -1)) == (1, 1, 5, 1)
