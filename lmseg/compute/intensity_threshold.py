'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Maximum separability (Otsu-family) threshold selection on a Histogram,
    including the local-maximum variant refined by a double Gaussian fit
'''
import logging
from typing import List, Tuple

import numpy as np
from scipy.optimize import minimize

from lmseg.image.histogram import Histogram

logger = logging.getLogger(__name__)

# at most this many candidate cutoffs with adaptive_increment
NUM_STEPS = 1000
# omega or 1 - omega below this counts as zero
OMEGA_EPS = 1e-8
FIT_MAX_ITERATIONS = 20000


def threshold_candidates(
    hist: Histogram,
    adaptive_increment: bool = False,
    increment: int = 1
) -> np.ndarray:
    '''
    Candidate cutoffs k from hist.min_value to hist.max_value, skipping 0.

    Parameters
    ----------
    hist : Histogram
        Histogram to threshold
    adaptive_increment : bool
        Choose the step so that about NUM_STEPS candidates are evaluated
    increment : int
        Step between candidates when adaptive_increment is False

    Returns
    -------
    numpy.ndarray
        Candidate cutoffs in increasing order
    '''
    if adaptive_increment:
        increment = int((hist.max_value - hist.min_value + 1) / NUM_STEPS)
    increment = max(int(increment), 1)
    ks = np.arange(hist.min_value, hist.max_value + 1, increment, dtype=np.int64)
    return ks[ks != 0]


def separability_curve(
    hist: Histogram,
    adaptive_increment: bool = False,
    increment: int = 1
) -> Tuple[np.ndarray, np.ndarray]:
    '''
    Between-class separability eta(k) for every candidate cutoff.

    omega(k) is the fraction of nonzero pixels with value <= k, mu(k) the
    intensity-weighted cumulative mean up to k (both normalised by the
    nonzero pixel count) and

        eta = omega * (1 - omega) * ((mean_nonzero - mu) / (1 - omega) - mu / omega) ** 2

    eta is 0 where omega or 1 - omega is numerically zero.

    Returns
    -------
    (ks, eta) : tuple of numpy.ndarray
    '''
    ks = threshold_candidates(hist, adaptive_increment, increment)
    nonzero = hist.nonzero_counts
    if nonzero <= 0 or ks.size == 0:
        return ks, np.zeros(ks.size, dtype=np.float64)

    counts = hist.counts.astype(np.float64)
    weighted = np.cumsum(counts * np.arange(counts.size))
    # bucket 0 contributes to neither omega nor mu
    omega = (hist.cumulative_counts[ks] - hist.counts[0]) / nonzero
    mu = weighted[ks] / nonzero

    eta = np.zeros(ks.size, dtype=np.float64)
    valid = (omega > OMEGA_EPS) & (1.0 - omega > OMEGA_EPS)
    w = omega[valid]
    m = mu[valid]
    eta[valid] = w * (1.0 - w) * ((hist.mean_nonzero - m) / (1.0 - w) - m / w) ** 2
    return ks, eta


def _first_argmax(ks: np.ndarray, eta: np.ndarray) -> int:
    if ks.size == 0 or not np.any(eta > 0):
        return 0
    # np.argmax returns the first maximal index, so ties keep the lowest k
    return int(ks[int(np.argmax(eta))])


def maximum_separability_threshold(
    hist: Histogram,
    adaptive_increment: bool = False,
    increment: int = 1
) -> int:
    '''
    Cutoff maximising separability; the lowest k wins ties. Returns 0 for a
    degenerate histogram (no nonzero pixels, or a single populated value).
    '''
    ks, eta = separability_curve(hist, adaptive_increment, increment)
    threshold = _first_argmax(ks, eta)
    logger.debug(f"Maximum separability threshold: {threshold}")
    return threshold


def find_local_maxima(eta: np.ndarray) -> List[int]:
    '''
    Interior indices whose value is strictly above the nearest value on each
    side that differs from it. Plateaus are skipped over when looking for
    those neighbours, so every point of a raised plateau is reported.
    '''
    maxima = []
    n = len(eta)
    for c in range(1, n - 1):
        previous = c - 1
        while previous > 0 and eta[previous] == eta[c]:
            previous -= 1
        following = c + 1
        while following < n - 1 and eta[following] == eta[c]:
            following += 1
        if eta[c] > eta[previous] and eta[c] > eta[following]:
            maxima.append(c)
    return maxima


def double_gaussian(x: np.ndarray, parameters: np.ndarray) -> np.ndarray:
    '''
    Sum of two Gaussians. parameters = (A0, mean0, sd0, A1, mean1, sd1).
    '''
    a0, mean0, s0, a1, mean1, s1 = parameters
    return (a0 * np.exp(-(x - mean0) ** 2 / (2.0 * s0 * s0))
            + a1 * np.exp(-(x - mean1) ** 2 / (2.0 * s1 * s1)))


def fit_double_gaussian(
    eta: np.ndarray,
    position0: int,
    position1: int,
    max_iterations: int = FIT_MAX_ITERATIONS
) -> np.ndarray:
    '''
    Least-squares fit of a double Gaussian to a separability curve.

    The curve is indexed by candidate position (0..len-1), not by intensity.
    The fit starts with one component at each position, amplitudes read off
    the curve and both spreads a quarter of the distance between them. It is
    deterministic and bounded by `max_iterations` simplex iterations.

    Returns
    -------
    numpy.ndarray
        Fitted (A0, mean0, sd0, A1, mean1, sd1)
    '''
    x = np.arange(len(eta), dtype=np.float64)
    spread = (position1 - position0) / 4.0
    start = np.array([eta[position0], position0, spread,
                      eta[position1], position1, spread], dtype=np.float64)

    def sum_squared_error(parameters: np.ndarray) -> float:
        residual = eta - double_gaussian(x, parameters)
        return float(np.dot(residual, residual))

    with np.errstate(divide='ignore', over='ignore', invalid='ignore'):
        result = minimize(
            sum_squared_error,
            start,
            method='Nelder-Mead',
            options={'maxiter': max_iterations, 'maxfev': 2 * max_iterations,
                     'xatol': 1e-6, 'fatol': 1e-10}
        )
    logger.debug(f"Double gaussian fit: success={result.success}, "
                 f"iterations={result.nit}, parameters={result.x}")
    return result.x


def fit_seed_positions(eta: np.ndarray, maxima: List[int]) -> Tuple[int, int]:
    '''
    Starting positions of the two components of the double Gaussian fit.

    Only local maxima above half of the strongest one are considered. The
    first and last of those seed the fit, so a run of equal maxima (a
    separability plateau) is spanned instead of being seeded at two
    neighbouring points. With a single such maximum the second seed is
    placed halfway between it and the end of the curve.

    Parameters
    ----------
    eta : numpy.ndarray
        Separability curve
    maxima : list of int
        Local maxima of eta, in increasing order

    Returns
    -------
    (int, int)
        Seed positions, first <= second
    '''
    best = max(eta[c] for c in maxima)
    qualifying = [c for c in maxima if eta[c] > 0.5 * best]
    if len(qualifying) > 1:
        return qualifying[0], qualifying[-1]
    position0 = qualifying[0]
    return position0, (len(eta) - position0) // 2 + position0


def local_maximum_separability_threshold(
    hist: Histogram,
    adaptive_increment: bool = False,
    increment: int = 1
) -> int:
    '''
    Threshold from the local maxima of the separability curve.

    The first and last local maxima of eta above half the strongest one (or
    the single one and a point halfway to the end of the curve) seed a
    double Gaussian fit, see fit_seed_positions. The fitted
    mean of the second component, truncated to a candidate position, gives
    the threshold. When there is no local maximum, the seeds coincide, or the
    fit lands outside the evaluated candidates, the global maximum is used.

    Parameters
    ----------
    hist : Histogram
        Histogram to threshold
    adaptive_increment : bool
        Subsample candidates to about NUM_STEPS
    increment : int
        Candidate step when not adaptive

    Returns
    -------
    int
        Threshold; pixels below it are background
    '''
    ks, eta = separability_curve(hist, adaptive_increment, increment)
    global_best = _first_argmax(ks, eta)

    maxima = find_local_maxima(eta)
    if not maxima:
        logger.debug("No local separability maximum, using global maximum")
        return global_best

    position0, position1 = fit_seed_positions(eta, maxima)
    logger.debug(f"Fit seeds at k={ks[position0]} and k={ks[min(position1, len(ks) - 1)]}")
    if position1 <= position0 or position1 >= len(eta):
        logger.debug("Degenerate fit seeds, using global maximum")
        return global_best

    fitted = fit_double_gaussian(eta, position0, position1)
    mean1 = fitted[4]
    if not np.isfinite(mean1) or not 0 <= int(mean1) < len(ks):
        logger.info(f"Double gaussian fit diverged (mean={mean1}), using global maximum {global_best}")
        return global_best

    threshold = int(ks[int(mean1)])
    logger.debug(f"Local maximum separability threshold: {threshold}")
    return threshold
