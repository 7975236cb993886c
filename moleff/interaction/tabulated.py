# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
Tabulated potentials.

The energy of a wrapped potential is sampled once on a uniform grid
and evaluated afterwards by linear interpolation between adjacent
samples. The force is taken from the wrapped potential, so that it is
not affected by the error of the derivative of the interpolant.
"""

import logging
import numpy

from moleff.core.errors import ConfigurationError

_log = logging.getLogger(__name__)


class TabulatedPotential(object):

    def __init__(self, potential, rmax, n):
        """
        Tabulate `potential` on `n + 1` points between 0 and `rmax`.

        The table is zero beyond `rmax`.
        """
        if int(n) != n or n < 1:
            raise ConfigurationError('table must have at least one interval (got %s)' % n)
        if rmax <= 0:
            raise ConfigurationError('table maximum must be positive (got %s)' % rmax)
        self.potential = potential
        self.rmax = float(rmax)
        self.n = int(n)
        self.delta = self.rmax / self.n

        x = numpy.linspace(0.0, self.rmax, self.n + 1)
        with numpy.errstate(divide='ignore', invalid='ignore', over='ignore'):
            u = numpy.asarray(potential.energy(x), dtype=float)
        u = numpy.array(numpy.broadcast_to(u, x.shape))
        # For potentials that diverge at zero, we remove the singularity by hand
        if self.n > 1 and not numpy.isfinite(u[0]):
            u[0] = u[1]
        if not numpy.all(numpy.isfinite(u)):
            raise ConfigurationError('cannot tabulate {} up to {}: non-finite values'.format(potential, rmax))
        self.table = u
        _log.debug('tabulated %s with %d points up to %g', potential, self.n + 1, self.rmax)

    @property
    def name(self):
        return 'tabulated ' + self.potential.name

    @property
    def params(self):
        return self.potential.params

    @property
    def bounded(self):
        return self.potential.bounded

    def __str__(self):
        return self.name

    def report(self):
        return 'potential {0.name}\nparameters: {0.params}\ntable: {0.n} points up to {0.rmax}\n'.format(self)

    def energy(self, x):
        x = numpy.asarray(x, dtype=float)
        scaled = x / self.delta
        idx = numpy.floor(scaled).astype(int)
        inside = (x >= 0) & (idx < self.n)
        idx = numpy.clip(idx, 0, self.n - 1)
        frac = scaled - idx
        u = self.table[idx] * (1 - frac) + self.table[idx + 1] * frac
        # The last point of the table is inside
        u = numpy.where(inside | (x == self.rmax), u, 0.0)
        if u.ndim == 0:
            return float(u)
        return u

    def force(self, x):
        f = self.potential.force(x)
        return numpy.where(numpy.asarray(x) <= self.rmax, f, 0.0)

    def compute(self, x):
        return self.energy(x), self.force(x)

    def tail(self, rc):
        return self.potential.tail(rc)
