import numpy as np
import pytest

from lmseg.compute.intensity_threshold import (
    double_gaussian,
    find_local_maxima,
    fit_double_gaussian,
    fit_seed_positions,
    local_maximum_separability_threshold,
    maximum_separability_threshold,
    separability_curve,
    threshold_candidates,
)
from lmseg.image import Histogram


def test_bimodal_threshold_falls_between_population_means(bimodal_image):
    threshold = maximum_separability_threshold(Histogram.build(bimodal_image))
    assert 50 < threshold < 200


def test_threshold_shifts_with_intensity(bimodal_image):
    shift = 7
    threshold = maximum_separability_threshold(Histogram.build(bimodal_image))
    shifted = maximum_separability_threshold(Histogram.build(bimodal_image + shift))
    assert shifted == threshold + shift


def test_ties_keep_the_lowest_cutoff():
    # every cutoff between 10 and 19 separates the two values equally well
    image = np.array([[10, 10, 20, 20]], dtype=float)
    assert maximum_separability_threshold(Histogram.build(image)) == 10


@pytest.mark.parametrize("image", [np.zeros((4, 4)), np.full((4, 4), 7.0)])
def test_degenerate_histograms_give_zero(image):
    hist = Histogram.build(image)
    assert maximum_separability_threshold(hist) == 0
    assert local_maximum_separability_threshold(hist) == 0


def test_background_does_not_enter_separability():
    image = np.array([[0, 0, 0, 0, 0, 0, 10, 10, 20, 20]], dtype=float)
    ks, eta = separability_curve(Histogram.build(image))
    assert ks[0] == 1
    # omega only counts nonzero pixels, so k < 10 has omega == 0
    assert np.all(eta[ks < 10] == 0)
    assert maximum_separability_threshold(Histogram.build(image)) == 10


def test_candidates_skip_zero_and_honour_increment():
    hist = Histogram.build(np.array([[0, 3, 9, 12]], dtype=float))
    np.testing.assert_array_equal(threshold_candidates(hist), np.arange(1, 13))
    np.testing.assert_array_equal(threshold_candidates(hist, increment=4), [4, 8, 12])


def test_adaptive_increment_limits_candidates():
    image = np.linspace(1, 5000, 100).reshape(10, 10)
    hist = Histogram.build(image)
    ks = threshold_candidates(hist, adaptive_increment=True)
    assert ks.size <= 1000
    assert np.all(np.diff(ks) == 5)


def test_find_local_maxima_skips_plateaus():
    eta = np.array([0, 1, 3, 3, 2, 5, 4], dtype=float)
    assert find_local_maxima(eta) == [2, 3, 5]
    assert find_local_maxima(np.array([1.0, 2.0, 3.0])) == []


def test_double_gaussian_fit_recovers_both_peaks():
    x = np.arange(200, dtype=float)
    true = np.array([3.0, 60.0, 8.0, 2.0, 140.0, 10.0])
    eta = double_gaussian(x, true)
    assert find_local_maxima(eta) == [60, 140]

    fitted = fit_double_gaussian(eta, 60, 140)
    assert abs(fitted[1] - 60) <= 1
    assert abs(fitted[4] - 140) <= 1


def test_local_maximum_threshold_is_an_evaluated_candidate(bimodal_image):
    hist = Histogram.build(bimodal_image)
    threshold = local_maximum_separability_threshold(hist)
    assert threshold in set(threshold_candidates(hist).tolist())


def test_local_maximum_falls_back_to_global_without_local_maxima():
    hist = Histogram.build(np.array([[10, 10, 20, 20]], dtype=float))
    assert local_maximum_separability_threshold(hist) == maximum_separability_threshold(hist) == 10


def test_fit_seeds_keep_first_and_last_strong_maxima():
    eta = np.array([0, 3, 0, 2, 0, 1, 0], dtype=float)
    assert fit_seed_positions(eta, [1, 3, 5]) == (1, 3)
    # a lone strong maximum gets a partner halfway to the end
    eta = np.array([0, 5, 0, 1, 0, 0], dtype=float)
    assert fit_seed_positions(eta, [1, 3]) == (1, 3)


def test_fit_seeds_span_separability_plateau(bimodal_image):
    hist = Histogram.build(bimodal_image)
    ks, eta = separability_curve(hist)
    maxima = find_local_maxima(eta)
    position0, position1 = fit_seed_positions(eta, maxima)
    # the empty gap between the populations is one long plateau of equal maxima
    assert position1 - position0 > 10
    assert ks[position0] <= maximum_separability_threshold(hist) <= ks[position1]
    assert eta[position0] == eta[position1] == eta.max()


def test_local_maximum_threshold_separates_bimodal_populations(bimodal_image):
    threshold = local_maximum_separability_threshold(Histogram.build(bimodal_image))
    assert 50 < threshold < 200
