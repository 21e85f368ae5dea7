import numpy as np
import pytest

from lmseg.errors import MissingReferenceError
from lmseg.image import Coordinate, PixelGrid
from lmseg.seg import (
    apply_local_maximum_separability,
    apply_maximum_separability,
    invert,
    label,
    mask,
    recursive_maximum_separability,
    region_maximum_separability,
    region_threshold,
    size_filter,
)


@pytest.fixture
def bridged_blobs():
    '''
    Two 10x10 blobs at 200 joined by a 2-pixel high bridge at 100, with a
    single dimmer column (99) in the middle of the bridge.
    '''
    image = np.zeros((20, 40))
    image[5:15, 5:15] = 200
    image[5:15, 25:35] = 200
    image[9:11, 15:25] = 100
    image[9:11, 20] = 99
    return image


def test_apply_maximum_separability_keeps_bright_pixels(bimodal_image):
    image = bimodal_image.copy()
    threshold = apply_maximum_separability(image)
    assert np.all(image[bimodal_image < threshold] == 0)
    np.testing.assert_array_equal(image[bimodal_image >= threshold],
                                  bimodal_image[bimodal_image >= threshold])
    assert np.count_nonzero(image) == pytest.approx(5000, abs=10)


def test_low_class_top_value_survives():
    image = np.array([[10, 10, 20, 20]], dtype=float)
    assert apply_maximum_separability(image) == 10
    np.testing.assert_array_equal(image, [[10, 10, 20, 20]])


def test_only_box_of_interest_is_thresholded(bimodal_image):
    grid = PixelGrid(bimodal_image.copy())
    grid.set_box_of_interest(Coordinate(x=0, y=0), Coordinate(x=50, y=100))
    apply_maximum_separability(grid)
    np.testing.assert_array_equal(grid.data[:, 50:], bimodal_image[:, 50:])
    assert (grid.data[:, :50] == 0).any()


def test_local_variant_thresholds_in_place(bimodal_image):
    image = bimodal_image.copy()
    threshold = apply_local_maximum_separability(image)
    assert threshold > 0
    assert image.min() == 0 or threshold <= bimodal_image.min()
    assert np.all(image[image > 0] >= threshold)


def test_recursive_thresholding_finds_blobs(blob_image):
    foreground = blob_image.copy()
    apply_maximum_separability(foreground)
    labels = recursive_maximum_separability(foreground, blob_image, min_size=25, max_size=1000)
    assert labels.num_regions == 2
    assert labels.data[9, 9] > 0
    assert labels.data[29, 29] > 0
    assert labels.data[9, 9] != labels.data[29, 29]
    assert labels.region_sizes()[1:].max() <= 1000


def test_recursive_thresholding_splits_large_regions(bridged_blobs):
    assert label(bridged_blobs).num_regions == 1
    labels = recursive_maximum_separability(bridged_blobs > 0, bridged_blobs,
                                            min_size=5, max_size=150)
    assert labels.num_regions == 2
    assert labels.data[10, 20] == 0
    assert labels.data[10, 10] != labels.data[10, 30]
    assert labels.region_sizes()[1:].max() <= 150


def test_recursion_limit_of_zero_only_filters_by_size(bridged_blobs):
    labels = recursive_maximum_separability(bridged_blobs > 0, bridged_blobs,
                                            min_size=5, max_size=150, max_recursions=0)
    assert labels.num_regions == 1


def test_recursive_thresholding_removes_small_regions():
    image = np.zeros((10, 10))
    image[1:3, 1:3] = 50
    image[5:9, 5:9] = 50
    labels = recursive_maximum_separability(image > 0, image, min_size=5)
    assert labels.num_regions == 1
    assert labels.data[1, 1] == 0
    assert labels.data[6, 6] == 1


def test_recursive_thresholding_labels_volumes_with_6_connectivity():
    volume = np.zeros((2, 6, 6))
    volume[0, 0:3, 0:3] = 10
    volume[1, 3:6, 3:6] = 10
    labels = recursive_maximum_separability(volume > 0, volume, min_size=1)
    assert labels.num_regions == 2


def test_recursive_thresholding_requires_reference():
    with pytest.raises(MissingReferenceError):
        recursive_maximum_separability(np.ones((4, 4)), None)
    with pytest.raises(ValueError):
        recursive_maximum_separability(np.ones((4, 4)), np.ones((5, 5)))


def test_mask_clears_pixels_outside_reference():
    image = np.full((2, 3), 7.0)
    reference = np.array([[0, 1, 0], [2, 0, 3]])
    mask(image, reference)
    np.testing.assert_array_equal(image, [[0, 7, 0], [7, 0, 7]])
    with pytest.raises(MissingReferenceError):
        mask(image, None)


def test_invert_uses_truncated_maximum():
    image = np.array([[0.0, 2.0], [4.5, 1.0]])
    invert(image)
    np.testing.assert_array_equal(image, [[4.0, 2.0], [-0.5, 3.0]])


def test_size_filter_keeps_label_numbers():
    labels = np.zeros((6, 6), dtype=np.int64)
    labels[0, 0] = 1
    labels[2:4, 2:4] = 2
    labels[5, :] = 3
    filtered = size_filter(labels, min_size=2, max_size=5)
    assert set(np.unique(filtered.data)) == {0, 2}
    with pytest.raises(ValueError):
        size_filter(labels, min_size=6, max_size=5)


def test_region_threshold_drops_dim_regions():
    reference = np.zeros((3, 16))
    reference[1, 0:4] = [8, 9, 10, 11]
    reference[1, 6:10] = [98, 99, 100, 101]
    reference[1, 12:16] = [108, 109, 110, 111]
    labels = np.zeros((3, 16), dtype=np.int64)
    labels[1, 0:4] = 1
    labels[1, 6:10] = 2
    labels[1, 12:16] = 3

    result = region_threshold(labels, reference)
    assert set(np.unique(result.data)) == {0, 2, 3}
    with pytest.raises(MissingReferenceError):
        region_threshold(labels, None)


def test_region_maximum_separability_drops_background_like_regions():
    reference = np.full((10, 10), 20.0)
    labels = np.zeros((10, 10), dtype=np.int64)
    for number, (y, x, value) in enumerate([(1, 1, 20), (1, 6, 22), (6, 1, 60), (6, 6, 61)], start=1):
        reference[y:y + 2, x:x + 2] = value
        labels[y:y + 2, x:x + 2] = number

    result = region_maximum_separability(labels, reference)
    assert set(np.unique(result.data)) == {0, 2, 3, 4}


def test_region_maximum_separability_skips_clear_foreground():
    reference = np.full((10, 10), 10.0)
    labels = np.zeros((10, 10), dtype=np.int64)
    reference[1:3, 1:3] = 100
    reference[6:8, 6:8] = 120
    labels[1:3, 1:3] = 1
    labels[6:8, 6:8] = 2
    result = region_maximum_separability(labels, reference)
    np.testing.assert_array_equal(result.data, labels)


def test_size_filter_accepts_unsigned_labels():
    labels = np.zeros((4, 4), dtype=np.uint64)
    labels[0, 0] = 1
    labels[2:4, 2:4] = 2
    filtered = size_filter(labels, min_size=2, max_size=10)
    np.testing.assert_array_equal(np.unique(filtered.data), [0, 2])
