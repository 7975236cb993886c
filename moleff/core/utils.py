# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""Helper functions"""

import sys
import logging
from logging import NullHandler

import numpy


# Logging facilities

LOGGER_NAME = 'moleff'
DEFAULT_LOGGING_FORMAT = '[%(levelname)s/%(name)s] %(message)s'


def log_to_stderr(level=None):
    """
    Turn on logging and add a handler which prints to stderr
    """
    logger = logging.getLogger(LOGGER_NAME)
    formatter = logging.Formatter(DEFAULT_LOGGING_FORMAT)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    if level:
        logger.setLevel(level)
    return logger


# Parallel environment

def parallel_reduce(func, size, workers=1):
    """
    Split `range(size)` in `workers` chunks, call `func(indices)` on
    each chunk and sum the returned tuples element-wise.

    Each call of `func` must return a tuple of numbers or numpy arrays
    it owns, so that partial results never share memory. With a single
    worker `func` is called once in the current thread.
    """
    indices = numpy.arange(size)
    if workers <= 1 or size <= 1:
        return func(indices)

    from concurrent.futures import ThreadPoolExecutor
    chunks = [chunk for chunk in numpy.array_split(indices, workers) if len(chunk) > 0]
    with ThreadPoolExecutor(max_workers=len(chunks)) as executor:
        partials = list(executor.map(func, chunks))

    total = list(partials[0])
    for partial in partials[1:]:
        for i, value in enumerate(partial):
            total[i] = total[i] + value
    return tuple(total)


# Miscellaneous

def canonical_key(species):
    """
    Return the lookup key of a tuple of `species`.

    Keys are invariant under reversal, so that (A, B) and (B, A), or
    (H, O, C) and (C, O, H), collide to the same key.
    """
    species = tuple(species)
    reverse = species[::-1]
    try:
        return min(species, reverse)
    except TypeError:
        # Mixed species types, fall back to string comparison
        return species if tuple(map(str, species)) <= tuple(map(str, reverse)) else reverse
