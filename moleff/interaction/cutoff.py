# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
Cut-off schemes for pair potentials.

The potential is truncated at the cut-off distance `radius` and
optionally shifted so that the energy vanishes at the cut-off. The
force is never altered within the cut-off.
"""

import numpy

from moleff.core.errors import ConfigurationError

_db = {'c': 'cut',
       'cs': 'cut and shifted'}

_schemes = {'c': 'c', 'cut': 'c', 'simple': 'c',
            'cs': 'cs', 'CS': 'cs', 'shifted': 'cs'}


class CutOff(object):

    def __init__(self, scheme, radius, tail=False):
        """
        Available schemes:

        - cut: `c`, `cut` or `simple`
        - cut and shifted: `cs`, `CS` or `shifted`

        If `tail` is `True`, analytic tail corrections are applied to
        the energy and pressure of the truncated potential.
        """
        if scheme not in _schemes:
            raise ConfigurationError('unknown cutoff scheme %s' % scheme)
        if not radius > 0:
            raise ConfigurationError('cutoff radius must be positive (got %s)' % radius)
        self.scheme = _schemes[scheme]
        self.radius = float(radius)
        self.tail = tail
        self.vcut = 0.0

    @classmethod
    def parse(cls, value, tail=False):
        """
        Build a `CutOff` from a number (simple truncation) or from a
        dict `{'shifted': radius}`.
        """
        if isinstance(value, CutOff):
            return value
        if isinstance(value, dict):
            if len(value) != 1:
                raise ConfigurationError('invalid cutoff specification %s' % value)
            scheme, radius = list(value.items())[0]
            return cls(scheme, radius, tail)
        return cls('c', value, tail)

    def __str__(self):
        return _db[self.scheme]

    def __repr__(self):
        return 'CutOff({0.scheme!r}, {0.radius}, tail={0.tail})'.format(self)

    def is_zero(self, r):
        """Return true if `r` is beyond cutoff `radius`"""
        return r > self.radius

    def tailor(self, potential):
        """Adjust the cut off to a potential."""
        if self.scheme == 'cs':
            self.vcut = float(potential.energy(self.radius))

    def smooth(self, r, u, f):
        """
        Truncate and smooth the energy `u` and force `f` evaluated at
        distance `r`.
        """
        beyond = self.is_zero(r)
        u = numpy.where(beyond, 0.0, u - self.vcut)
        f = numpy.where(beyond, 0.0, f)
        return u, f
