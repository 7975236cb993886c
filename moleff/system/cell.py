# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""Simulation cell."""

import numpy
from moleff.core import ndim as _ndim


class Cell(object):

    """Orthorhombic simulation cell centered at the origin."""

    def __init__(self, side=None):
        if side is None:
            self.side = numpy.zeros(_ndim)
        else:
            self.side = numpy.asarray(side, dtype=numpy.float64)

    @property
    def volume(self):
        return numpy.prod(self.side)

    def __repr__(self):
        return 'Cell(side={})'.format(self.side)
