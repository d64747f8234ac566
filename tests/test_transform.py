# Tests for the transform stage
"""
Sizing policy, nearest-neighbor resizing, inversion and flips.
"""

import numpy as np
import pytest

from stagterm import FrameSequence, InputValidationError, PlaybackConfig
from stagterm.transform import (
    MAX_DIMENSION,
    SIZE_FORMAT_ERROR,
    compute_target_size,
    flip_horizontal,
    flip_vertical,
    invert_colors,
    parse_size,
    transform_frame,
    transform_sequence,
)


@pytest.fixture
def test_image():
    """Create a 3x2 RGBA image with unique colors at each position.

    Layout (row, col):
        (0,0)=Red     (0,1)=Green   (0,2)=Blue
        (1,0)=Yellow  (1,1)=Cyan    (1,2)=Magenta (half transparent)
    """
    return np.array([
        [[255, 0, 0, 255], [0, 255, 0, 255], [0, 0, 255, 255]],
        [[255, 255, 0, 255], [0, 255, 255, 255], [255, 0, 255, 128]],
    ], dtype=np.uint8)


class TestParseSize:
    """Tests for the --size parser."""

    def test_valid(self):
        """WxH yields (width, height)."""
        assert parse_size("10x20") == (10, 20)

    @pytest.mark.parametrize("text", ["10xA", "0x5", "5x0", "10", "10x20x3", "-5x5", "x"])
    def test_invalid(self, text):
        """Anything but two positive integers is rejected."""
        with pytest.raises(InputValidationError) as exc_info:
            parse_size(text)
        assert str(exc_info.value) == SIZE_FORMAT_ERROR


class TestComputeTargetSize:
    """Tests for the sizing policy."""

    def test_default_landscape(self):
        """The longer side becomes 64, the other scales proportionally."""
        assert compute_target_size(100, 50, PlaybackConfig(file="a")) == (64, 32)

    def test_default_portrait(self):
        """Height is the longer side for tall images."""
        assert compute_target_size(50, 100, PlaybackConfig(file="a")) == (32, 64)

    def test_default_truncates(self):
        """Proportional side is truncated toward zero."""
        # 64 * 30 / 100 = 19.2
        assert compute_target_size(100, 30, PlaybackConfig(file="a")) == (64, 19)

    def test_square_uses_width_branch(self):
        """Square images end up 64x64."""
        assert compute_target_size(30, 30, PlaybackConfig(file="a")) == (64, 64)

    def test_explicit_size_ignores_aspect(self):
        """An explicit size wins regardless of the source aspect ratio."""
        config = PlaybackConfig(file="a", size="10x20")
        assert compute_target_size(100, 50, config) == (10, 20)

    def test_explicit_size_beats_preserve(self):
        """--size takes priority over --preserve-dims."""
        config = PlaybackConfig(file="a", size="10x20", preserve_dims=True)
        assert compute_target_size(100, 50, config) == (10, 20)

    def test_preserve_dims(self):
        """Source dimensions are kept."""
        config = PlaybackConfig(file="a", preserve_dims=True)
        assert compute_target_size(100, 50, config) == (100, 50)

    def test_scale_after_sizing(self):
        """Scale multiplies the computed size and truncates."""
        config = PlaybackConfig(file="a", scale=0.5)
        assert compute_target_size(100, 50, config) == (32, 16)

        config = PlaybackConfig(file="a", size="10x15", scale=1.5)
        assert compute_target_size(100, 50, config) == (15, 22)

    def test_custom_thumbnail_size(self):
        """The thumbnail edge is configurable."""
        assert compute_target_size(100, 50, PlaybackConfig(file="a"), 32) == (32, 16)

    def test_never_empty(self):
        """Extreme aspect ratios still produce at least one pixel."""
        assert compute_target_size(1000, 1, PlaybackConfig(file="a")) == (64, 1)

    @pytest.mark.parametrize("config", [
        PlaybackConfig(file="a", scale=1e9),
        PlaybackConfig(file="a", size="99999999999x1"),
        PlaybackConfig(file="a", preserve_dims=True, scale=1000),
    ])
    def test_too_large(self, config):
        """Sizes a terminal frame can never use are rejected."""
        with pytest.raises(InputValidationError) as exc_info:
            compute_target_size(100, 50, config)
        assert "too large" in str(exc_info.value)

    def test_largest_allowed(self):
        """The limit itself is accepted."""
        config = PlaybackConfig(file="a", size=f"{MAX_DIMENSION}x1")
        assert compute_target_size(100, 50, config) == (MAX_DIMENSION, 1)


class TestColorAndFlip:
    """Tests for invert and flip operations."""

    def test_invert_is_self_inverse(self, test_image):
        """Inverting twice restores the original bit for bit."""
        original = test_image.copy()
        invert_colors(invert_colors(test_image))
        assert np.array_equal(test_image, original)

    def test_invert_keeps_alpha(self, test_image):
        """Alpha is never altered."""
        alpha = test_image[:, :, 3].copy()
        invert_colors(test_image)
        assert np.array_equal(test_image[:, :, 3], alpha)
        assert tuple(test_image[0, 0]) == (0, 255, 255, 255)

    def test_flip_horizontal(self, test_image):
        """Left and right columns swap."""
        flipped = flip_horizontal(test_image)
        assert tuple(flipped[0, 0]) == (0, 0, 255, 255)
        assert tuple(flipped[1, 0]) == (255, 0, 255, 128)

    def test_flip_horizontal_twice(self, test_image):
        """A second horizontal flip restores the arrangement."""
        assert np.array_equal(flip_horizontal(flip_horizontal(test_image)), test_image)

    def test_flip_vertical(self, test_image):
        """Top and bottom rows swap."""
        flipped = flip_vertical(test_image)
        assert tuple(flipped[0, 0]) == (255, 255, 0, 255)
        assert np.array_equal(flip_vertical(flipped), test_image)


class TestTransformFrame:
    """Tests for the per-frame pipeline."""

    def test_nearest_neighbor(self, test_image):
        """Upscaling only repeats existing pixels, nothing is blended."""
        config = PlaybackConfig(file="a")
        result = transform_frame(test_image, (6, 4), config)
        assert result.shape == (4, 6, 4)
        originals = {tuple(p) for p in test_image.reshape(-1, 4)}
        produced = {tuple(p) for p in result.reshape(-1, 4)}
        assert produced <= originals

    def test_all_operations(self, test_image):
        """Invert, then mirror both ways."""
        config = PlaybackConfig(file="a", invert=True, flip_h=True, flip_v=True)
        result = transform_frame(test_image, (3, 2), config)
        # Original bottom-right magenta becomes top-left, inverted to green
        assert tuple(result[0, 0]) == (0, 255, 0, 128)

    def test_does_not_modify_source(self, test_image):
        """The source frame is left untouched."""
        original = test_image.copy()
        transform_frame(test_image, (3, 2), PlaybackConfig(file="a", invert=True))
        assert np.array_equal(test_image, original)


class TestTransformSequence:
    """Tests for whole sequence transformation."""

    def test_uniform_size(self, make_bitmap):
        """Every frame gets the size computed from the first one."""
        sequence = FrameSequence(frames=[make_bitmap(100, 50), make_bitmap(100, 50)])
        size = transform_sequence(sequence, PlaybackConfig(file="a"))
        assert size == (64, 32)
        assert all(frame.shape == (32, 64, 4) for frame in sequence)

    def test_invalid_size_mutates_nothing(self, make_bitmap):
        """A bad --size fails before any frame changes."""
        first = make_bitmap(100, 50)
        sequence = FrameSequence(frames=[first])
        with pytest.raises(InputValidationError):
            transform_sequence(sequence, PlaybackConfig(file="a", size="10xA"))
        assert sequence[0] is first
        assert first.shape == (50, 100, 4)

    def test_oversized_scale_mutates_nothing(self, make_bitmap):
        """An out of range --scale is a validation error, not a resize failure."""
        first = make_bitmap(100, 50)
        sequence = FrameSequence(frames=[first])
        with pytest.raises(InputValidationError):
            transform_sequence(sequence, PlaybackConfig(file="a", scale=1e9))
        assert sequence[0] is first

    def test_empty_sequence(self):
        """Nothing to do for an empty sequence."""
        assert transform_sequence(FrameSequence(), PlaybackConfig(file="a")) == (0, 0)
