# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
Topological restrictions of pair interactions.

A restriction decides whether a pair potential applies to a given
pair of particles, and with which scaling factor, based on the bond
distance between them and on their molecule membership.

| kind           | decision                                                   |
|----------------|------------------------------------------------------------|
| none           | include, scale 1                                           |
| intramolecular | include iff same molecule                                  |
| intermolecular | include iff different molecule                             |
| exclude12      | exclude 1-2 pairs                                          |
| exclude13      | exclude 1-2 and 1-3 pairs                                  |
| exclude14      | exclude 1-2, 1-3 and 1-4 pairs                             |
| scale14        | exclude 1-2 and 1-3 pairs, scale 1-4 pairs by `scale14`    |
"""

import numpy

from moleff.core.errors import ConfigurationError

kinds = ('none', 'intramolecular', 'intermolecular',
         'exclude12', 'exclude13', 'exclude14', 'scale14')

# Largest bond distance excluded by each exclusion kind
_excluded_distance = {'exclude12': 1, 'exclude13': 2, 'exclude14': 3, 'scale14': 2}


def _normalize(name):
    return name.lower().replace('-', '').replace('_', '')


class Restriction(object):

    def __init__(self, kind='none', scale14=None):
        kind = _normalize(kind)
        if kind not in kinds:
            raise ConfigurationError('unknown restriction %s' % kind)
        if kind == 'scale14':
            if scale14 is None or not 0.0 <= scale14 <= 1.0:
                raise ConfigurationError('scale14 factor must be in [0, 1] (got %s)' % scale14)
        elif scale14 is not None:
            raise ConfigurationError('restriction %s takes no scaling factor' % kind)
        self.kind = kind
        self.scale14 = scale14

    @classmethod
    def parse(cls, value):
        """
        Build a `Restriction` from `None`, a name or a dict of the
        form `{'scale14': factor}`.

        Names are case insensitive and may contain dashes or
        underscores, e.g. "IntraMolecular", "inter-molecular".
        """
        if value is None:
            return cls()
        if isinstance(value, Restriction):
            return value
        if isinstance(value, dict):
            if len(value) != 1 or _normalize(list(value.keys())[0]) != 'scale14':
                raise ConfigurationError('invalid restriction %s' % value)
            return cls('scale14', list(value.values())[0])
        return cls(value)

    def __str__(self):
        if self.kind == 'scale14':
            return 'scale14 = {}'.format(self.scale14)
        return self.kind

    def __repr__(self):
        return 'Restriction({})'.format(self)

    def __eq__(self, other):
        return isinstance(other, Restriction) and \
            self.kind == other.kind and self.scale14 == other.scale14

    def __hash__(self):
        return hash((self.kind, self.scale14))

    @property
    def scale(self):
        """Scaling factor of 1-4 pairs."""
        return self.scale14 if self.kind == 'scale14' else 1.0

    def information(self, bond_distance, same_molecule):
        """
        Return a tuple `(included, scale)` of arrays telling whether
        pairs at the given `bond_distance` (1, 2, 3, or 0 when
        unrelated) and with the given molecule membership
        `same_molecule` are included and with which scaling factor.
        """
        bond_distance = numpy.asarray(bond_distance)
        same_molecule = numpy.asarray(same_molecule, dtype=bool)
        scale = numpy.ones(bond_distance.shape)
        if self.kind == 'none':
            included = numpy.ones(bond_distance.shape, dtype=bool)
        elif self.kind == 'intramolecular':
            included = same_molecule.copy()
        elif self.kind == 'intermolecular':
            included = ~same_molecule
        else:
            related = bond_distance > 0
            included = ~(related & (bond_distance <= _excluded_distance[self.kind]))
            if self.kind == 'scale14':
                scale[bond_distance == 3] = self.scale14
        return included, scale
