import numpy as np
import pytest

from lmseg.errors import MissingReferenceError
from lmseg.seg import Seeded, Unseeded, label_by_seed, watershed


def test_unseeded_separates_two_pyramids(two_pyramids):
    labels = watershed(two_pyramids)
    assert labels.num_regions == 2
    assert labels.data[10, 10] > 0
    assert labels.data[10, 32] > 0
    assert labels.data[10, 10] != labels.data[10, 32]
    # background sits on the highest inverted level and is never flooded
    assert labels.data[0, 21] == 0


def test_unseeded_touching_pyramids_keep_a_boundary(touching_pyramids):
    labels = watershed(touching_pyramids, Unseeded())
    assert labels.num_regions == 2
    assert labels.data[10, 10] != labels.data[10, 30]
    assert not labels.data[:, 20].any()


def test_watershed_does_not_modify_input(two_pyramids):
    original = two_pyramids.copy()
    watershed(two_pyramids)
    np.testing.assert_array_equal(two_pyramids, original)


def test_flooding_without_inversion_grows_dark_basins(two_pyramids):
    # valleys of the negated pyramids are the peaks of the original
    labels = watershed(two_pyramids.max() - two_pyramids, invert=False)
    assert labels.num_regions == 2


def test_seeds_from_different_labels_never_merge(two_valleys):
    seeds = np.zeros(two_valleys.shape, dtype=np.int64)
    seeds[:, 5] = 1
    seeds[:, 25] = 2
    labels = watershed(two_valleys, Seeded.from_seeds(seeds))
    assert labels.num_regions == 2
    assert not labels.data[:, 16].any()
    assert not labels.data[:, 31].any()
    assert labels.data[5, 5] != labels.data[5, 25]
    np.testing.assert_array_equal(labels.data[:, 5], 1)


def test_unseeded_basin_merges_into_single_seed(two_valleys):
    seeds = np.zeros(two_valleys.shape, dtype=np.int64)
    seeds[:, 5] = 1
    labels = watershed(two_valleys, Seeded.from_seeds(seeds))
    assert labels.num_regions == 1
    assert labels.data[5, 25] == labels.data[5, 5] == 1


def test_seeded_requires_seeds(two_valleys):
    with pytest.raises(MissingReferenceError):
        Seeded.from_seeds(None)
    with pytest.raises(MissingReferenceError):
        Seeded(None, 0)
    with pytest.raises(ValueError):
        watershed(two_valleys, Seeded.from_seeds(np.zeros((3, 3))))


def test_label_by_seed_renumbers_seeded_regions():
    labels = np.array([[1, 1, 0, 2, 2], [0, 0, 0, 3, 3]])
    seeds = np.array([[0, 7, 0, 0, 0], [0, 0, 0, 0, 9]])
    result = label_by_seed(labels, seeds)
    np.testing.assert_array_equal(result.data, [[7, 7, 0, 2, 2], [0, 0, 0, 9, 9]])


def test_label_by_seed_last_seed_in_raster_order_wins():
    labels = np.array([[1, 1, 1]])
    seeds = np.array([[4, 0, 5]])
    result = label_by_seed(labels, seeds)
    np.testing.assert_array_equal(result.data, [[5, 5, 5]])


def test_label_by_seed_without_overlap_keeps_labels():
    labels = np.array([[1, 0], [0, 2]])
    result = label_by_seed(labels, np.array([[0, 3], [3, 0]]))
    np.testing.assert_array_equal(result.data, labels)
    with pytest.raises(MissingReferenceError):
        label_by_seed(labels, None)


def assert_consecutive_labels(labels):
    values = set(np.unique(labels.data).tolist())
    assert values | {0} == set(range(labels.num_regions + 1))
    assert labels.data.max() == labels.num_regions


def test_unseeded_output_is_barriers_or_consecutive_regions(rng):
    image = rng.integers(0, 20, size=(15, 17)).astype(np.float64)
    labels = watershed(image)
    assert labels.num_regions >= 1
    assert_consecutive_labels(labels)


def test_seeded_output_keeps_every_seed_distinct(rng):
    image = rng.integers(0, 20, size=(15, 17)).astype(np.float64)
    seeds = np.zeros(image.shape, dtype=np.int64)
    positions = [(1, 1), (1, 15), (13, 1), (13, 15)]
    for number, position in enumerate(positions, start=1):
        seeds[position] = number

    labels = watershed(image, Seeded.from_seeds(seeds))
    assert_consecutive_labels(labels)
    at_seeds = [labels.data[p] for p in positions]
    assert all(v > 0 for v in at_seeds)
    assert len(set(at_seeds)) == len(positions)
