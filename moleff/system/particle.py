# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""Point particles with species, position and charge."""

import collections
import numpy
from moleff.core import ndim as _ndim


class Particle(object):

    def __init__(self, species='A', position=None, charge=None, mass=1.0):
        self.species = species
        """Species label, used as lookup key in the interaction registry."""
        self.charge = charge
        """
        The electric charge. If `None`, the charge of the species is
        looked up in the charges table of the interaction.
        """
        self.mass = mass
        if position is None:
            self.position = numpy.zeros(_ndim)
        else:
            self.position = numpy.asarray(position, dtype=numpy.float64)

    def distance(self, particle):
        """
        Return the distance vector from another `particle`.

        No periodic boundary conditions are applied.
        """
        return self.position - particle.position

    def __repr__(self):
        return 'Particle(species={0.species}, charge={0.charge}, ' \
            'position={0.position}, mass={0.mass})'.format(self)


def distinct_species(particles):
    """Sorted distinct species of `particles`."""
    return sorted({p.species for p in particles})


def composition(particles):
    """Count the `particles` of each species."""
    counts = collections.Counter(p.species for p in particles)
    return dict(counts)
