import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def bimodal_image(rng):
    '''Two Gaussian populations (means 50 and 200, sd 10, equal counts), no zeros.'''
    low = rng.normal(50, 10, 5000)
    high = rng.normal(200, 10, 5000)
    values = np.clip(np.concatenate([low, high]), 1, None)
    return np.floor(values).reshape(100, 100)


@pytest.fixture
def blob_image(rng):
    '''Noisy plateau (40..59) with two bright 8x8 blobs (200).'''
    image = rng.integers(40, 60, size=(40, 40)).astype(np.float64)
    image[5:13, 5:13] = 200
    image[25:33, 25:33] = 200
    return image


def chebyshev_pyramid(shape, center, radius, peak):
    '''peak - d inside Chebyshev distance `radius` of center, 0 outside.'''
    yy, xx = np.indices(shape)
    distance = np.maximum(np.abs(yy - center[0]), np.abs(xx - center[1]))
    return np.where(distance <= radius, peak - distance, 0).astype(np.float64)


@pytest.fixture
def two_pyramids():
    '''Two separate pyramids of height 50 and radius 10 on a zero background.'''
    shape = (21, 43)
    return np.maximum(chebyshev_pyramid(shape, (10, 10), 10, 50),
                      chebyshev_pyramid(shape, (10, 32), 10, 50))


@pytest.fixture
def touching_pyramids():
    '''Two pyramids whose outer rings share column 20.'''
    shape = (21, 41)
    return np.maximum(chebyshev_pyramid(shape, (10, 10), 10, 50),
                      chebyshev_pyramid(shape, (10, 30), 10, 50))


@pytest.fixture
def two_valleys():
    '''
    Two valleys along x (at x=5, level 1, and x=25, level 2) meeting in a
    ridge at level 11, with a last column at 100 that is never flooded.
    '''
    xx = np.arange(32)
    profile = np.minimum(np.abs(xx - 5) + 1, np.abs(xx - 25) + 2).astype(np.float64)
    profile[31] = 100
    return np.tile(profile, (11, 1))
