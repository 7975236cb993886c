# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""Potential functions."""

import inspect
import numpy

from moleff.core.errors import ConfigurationError
from moleff.interaction import library

# These potentials do not vanish at large distances, their tail
# integral is not defined
_unbounded = ['harmonic', 'cosine_harmonic', 'torsion']


class Potential(object):

    """
    Potential energy as a function of a single coordinate.

    The coordinate is the distance for pair and bond terms, the angle
    for angle terms and the dihedral angle for torsion terms.
    """

    def __init__(self, func, params=None):
        """
        If `func` is a string, it will be looked up into the library
        of potentials (the `library` module, including its aliases).

        If `func` is a function, it is used as a user-defined
        potential. It takes the coordinate as a first argument plus an
        arbitrary number of keyword arguments. The `params` dict will
        be passed to the function. It must return the tuple (u, f)
        where f = - du/dx.

        Examples:
        --------
        The Lennard-Jones potential:

        `Potential('lennard_jones', {'epsilon': 1.0, 'sigma': 1.0})`
        """
        self.func = func
        self.params = params if params is not None else {}
        self.user_defined = hasattr(func, '__call__')

        if not self.user_defined:
            name = library.aliases.get(func, func)
            if name not in library.__all__:
                raise ConfigurationError('unknown potential %s' % func)
            self.func = getattr(library, name)

        # Check the parameters now rather than at the first evaluation
        try:
            inspect.signature(self.func).bind(1.0, **self.params)
        except TypeError as error:
            raise ConfigurationError('invalid parameters {} for potential {}: {}'.format(
                self.params, self.name, error))

    @property
    def name(self):
        return self.func.__name__

    @property
    def bounded(self):
        """False if the potential does not vanish at large distance."""
        return self.user_defined or self.name not in _unbounded

    def __str__(self):
        return self.name

    def report(self):
        return 'potential {0.name}\nparameters: {0.params}\n'.format(self)

    def compute(self, x):
        """Compute the potential and the generalized force at `x`."""
        return self.func(x, **self.params)

    def energy(self, x):
        return self.compute(x)[0]

    def force(self, x):
        return self.compute(x)[1]

    def tail(self, rc):
        """
        Return the integrals int_rc^inf u(r) r^2 dr and int_rc^inf
        f(r) r^3 dr needed by tail corrections.

        Closed forms are used when available, otherwise the integrals
        are computed by numerical quadrature.
        """
        if not self.user_defined:
            if self.name in _unbounded:
                raise ConfigurationError('tail correction is undefined for potential %s' % self.name)
            closed_form = getattr(library, self.name + '_tail', None)
            if closed_form is not None:
                return closed_form(rc, **self.params)
        return _quadrature_tail(self.compute, rc)


def _quadrature_tail(compute, rc):
    from scipy.integrate import quad

    def energy(r):
        return float(compute(r)[0]) * r**2

    def virial(r):
        return float(compute(r)[1]) * r**3

    energy_integral = quad(energy, rc, numpy.inf)[0]
    virial_integral = quad(virial, rc, numpy.inf)[0]
    if not (numpy.isfinite(energy_integral) and numpy.isfinite(virial_integral)):
        raise ConfigurationError('tail correction integral does not converge beyond %s' % rc)
    return energy_integral, virial_integral
