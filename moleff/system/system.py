# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
Molecular system.

A `System` gathers the particles, the periodic cell, the bonded
topology and the interaction. The candidate interacting pairs come
from an external neighbor list and are stored in `System.pairs`;
they must be refreshed by the caller whenever particles move.
"""

import copy
import numpy

from .particle import composition, distinct_species


class System(object):

    def __init__(self, particle=None, cell=None, topology=None,
                 interaction=None, pairs=None):
        """
        `particle` is a list of `Particle` instances and `pairs` an
        iterable of candidate pairs `(i, j, rij)`, where `rij` is the
        minimum image of `r_i - r_j`. All arguments are optional.
        """
        self.particle = particle if particle is not None else []
        """Particles of the system."""
        self.cell = cell
        self.topology = topology
        self.interaction = interaction
        self.pairs = pairs

    @property
    def number_of_dimensions(self):
        """Dimensionality of particle positions, or of the cell when there are no particles."""
        if len(self.particle) > 0:
            return len(self.particle[0].position)
        if self.cell is not None:
            return len(self.cell.side)
        return 0

    @property
    def distinct_species(self):
        return distinct_species(self.particle)

    @property
    def composition(self):
        """Number of particles of each species, as a dict."""
        return dict(composition(self.particle))

    @property
    def density(self):
        if self.cell is None or len(self.particle) == 0:
            return 0.0
        return len(self.particle) / self.cell.volume

    def compute_interaction(self, what=None):
        """
        Feed the variables requested by `interaction.variables` to the
        interaction and compute the observable `what`.
        """
        if self.interaction is None:
            return
        kwargs = {}
        for name, field in self.interaction.variables.items():
            # Fields may carry a dtype, as in "particle.charge:float64"
            dtype = None
            if ':' in field:
                field, dtype = field.split(':')
            if field.startswith('cell') and self.cell is None:
                kwargs[name] = None
            else:
                kwargs[name] = self.dump(field, dtype=dtype, view=True)
        self.interaction.compute(what, **kwargs)

    def _observable(self, name, cache):
        if not cache or getattr(self.interaction, name) is None:
            self.compute_interaction('forces')
        return getattr(self.interaction, name)

    def potential_energy(self, per_particle=False, cache=False):
        """
        Total potential energy, or energy per particle if
        `per_particle` is `True`. With `cache`, the last computed value
        is reused when available.
        """
        if self.interaction is None:
            return 0.0
        energy = self._observable('energy', cache)
        if per_particle:
            return energy / len(self.particle)
        return energy

    def forces(self, cache=False):
        """(N, 3) array of the forces acting on the particles."""
        if self.interaction is None:
            return numpy.zeros((len(self.particle), self.number_of_dimensions))
        return self._observable('forces', cache)

    def virial(self, cache=False):
        """Virial tensor sum_i r_i f_i, including periodic images."""
        if self.interaction is None:
            ndim = self.number_of_dimensions
            return numpy.zeros((ndim, ndim))
        return self._observable('virial', cache)

    def pressure(self, temperature=0.0, cache=False):
        """
        Pressure at `temperature` (Boltzmann constant set to one),
        from the trace of the virial tensor.
        """
        ndim = self.number_of_dimensions
        kinetic = len(self.particle) * temperature
        return (kinetic + numpy.trace(self.virial(cache=cache)) / ndim) / self.cell.volume

    def dump(self, what, dtype=None, view=False):
        """
        Return particle or cell properties as numpy arrays.

        `what` is either an attribute of the system itself (e.g.
        `pairs`), or a field `particle.<attribute>` or
        `cell.<attribute>`. Bare names are taken as particle
        attributes. The short names `pos`, `spe`, `cha` and `box` stand
        for `particle.position`, `particle.species`, `particle.charge`
        and `cell.side`.

        Particle positions are returned as an (N, ndim) array. System
        attributes are deep copied unless `view` is `True`.

            #!python
            charge = system.dump('cha', dtype='float64')
        """
        if what in self.__dict__:
            data = getattr(self, what)
            return data if view else copy.deepcopy(data)

        short = {'pos': 'particle.position',
                 'spe': 'particle.species',
                 'cha': 'particle.charge',
                 'box': 'cell.side'}
        what = short.get(what, what)
        if not what.startswith('particle.') and not what.startswith('cell.'):
            what = 'particle.' + what
        obj, attribute = what.split('.', 1)

        if obj == 'particle':
            # Unset charges (None) become nan with a float dtype
            return numpy.array([getattr(p, attribute) for p in self.particle], dtype=dtype)
        if self.cell is None:
            raise ValueError('cannot dump %s without a cell' % what)
        return numpy.array(getattr(self.cell, attribute), dtype=dtype)

    def __str__(self):
        txt = 'system of {} particles\n'.format(len(self.particle))
        txt += 'composition: {}\n'.format(self.composition)
        if self.cell is not None:
            txt += 'cell sides: {}\n'.format(self.cell.side)
        if self.topology is not None:
            txt += 'bonds: {}\n'.format(len(self.topology.bonds))
        if self.interaction is not None:
            txt += '\n' + str(self.interaction)
        return txt
