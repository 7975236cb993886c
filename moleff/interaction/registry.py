# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
Registry of the interactions between species.

The registry maps unordered tuples of species (pairs, bonds, angles
and dihedrals) to ordered lists of interaction entries. Several
entries may share the same species, e.g. an unrestricted
Lennard-Jones potential and an intra-molecular harmonic potential
between the same pair of species.

Global defaults (cutoff, restriction, tail correction) are resolved
into each entry when it is added. The registry is frozen once it is
handed over to an `Interaction`, and it is read-only afterwards.
"""

import copy
import itertools
import logging

import numpy

from moleff.core.errors import ConfigurationError
from moleff.core.utils import canonical_key
from .cutoff import CutOff
from .restriction import Restriction

_log = logging.getLogger(__name__)


class InteractionEntry(object):

    """A potential applied to a tuple of species."""

    def __init__(self, species, potential, restriction=None, cutoff=None):
        self.species = canonical_key(species)
        self.potential = potential
        self.restriction = Restriction.parse(restriction)
        self.cutoff = cutoff
        self.scale = self.restriction.scale
        self.tail_integrals = None
        if self.cutoff is not None:
            self.cutoff.tailor(potential)
            if self.cutoff.tail:
                self.tail_integrals = potential.tail(self.cutoff.radius)

    def compute(self, x):
        """Compute the potential and smooth it via the cutoff"""
        u, f = self.potential.compute(x)
        if self.cutoff is not None:
            u, f = self.cutoff.smooth(x, u, f)
        return u, f

    def report(self):
        txt = 'interaction {0.species}: {1}'.format(self, self.potential.report())
        if self.cutoff is not None:
            txt += 'cutoff: {0.cutoff} at {0.cutoff.radius}\n'.format(self)
            if self.cutoff.tail:
                txt += 'tail correction: yes\n'
        if self.restriction.kind != 'none':
            txt += 'restriction: {}\n'.format(self.restriction)
        return txt

    def __repr__(self):
        return 'InteractionEntry({0.species}, {0.potential}, {0.restriction})'.format(self)


class InteractionRegistry(object):

    def __init__(self, cutoff=None, restriction=None, tail_correction=False):
        """
        The global `cutoff` (a `CutOff` instance, a number or a dict
        `{'shifted': radius}`), `restriction` and `tail_correction`
        apply to pair entries that do not override them.
        """
        self.cutoff = CutOff.parse(cutoff) if cutoff is not None else None
        self.restriction = Restriction.parse(restriction)
        self.default_tail = tail_correction
        self.pairs = {}
        self.bonds = {}
        self.angles = {}
        self.dihedrals = {}
        self.frozen = False

    def _add(self, db, entry):
        if self.frozen:
            raise ConfigurationError('cannot modify a frozen interaction registry')
        db.setdefault(entry.species, []).append(entry)
        _log.debug('added %r', entry)
        return entry

    def add_pair(self, species, potential, restriction=None, cutoff=None,
                 tail_correction=None):
        """
        Add a pair `potential` between the two `species`.

        Unset `restriction`, `cutoff` and `tail_correction` take the
        global values of the registry.
        """
        if len(species) != 2:
            raise ConfigurationError('pair interactions need two species (got %s)' % (species, ))
        if cutoff is None:
            if self.cutoff is None:
                raise ConfigurationError('no cutoff given for pair %s and no global cutoff' % (species, ))
            cutoff = self.cutoff
        # Each entry tailors its own copy of the cutoff
        cutoff = copy.deepcopy(CutOff.parse(cutoff))
        if tail_correction is not None:
            cutoff.tail = tail_correction
        else:
            cutoff.tail = cutoff.tail or self.default_tail
            # Potentials that do not vanish at large distance only get
            # a tail correction on explicit request
            if cutoff.tail and not potential.bounded:
                _log.debug('no tail correction for unbounded potential %s', potential)
                cutoff.tail = False
        if restriction is None:
            restriction = self.restriction
        entry = InteractionEntry(species, potential, restriction, cutoff)
        return self._add(self.pairs, entry)

    def add_bond(self, species, potential):
        if len(species) != 2:
            raise ConfigurationError('bonds need two species (got %s)' % (species, ))
        return self._add(self.bonds, InteractionEntry(species, potential))

    def add_angle(self, species, potential):
        if len(species) != 3:
            raise ConfigurationError('angles need three species (got %s)' % (species, ))
        return self._add(self.angles, InteractionEntry(species, potential))

    def add_dihedral(self, species, potential):
        if len(species) != 4:
            raise ConfigurationError('dihedrals need four species (got %s)' % (species, ))
        return self._add(self.dihedrals, InteractionEntry(species, potential))

    def freeze(self):
        """Make the registry read-only."""
        if not self.frozen:
            for db in (self.pairs, self.bonds, self.angles, self.dihedrals):
                for key in db:
                    db[key] = tuple(db[key])
            self.frozen = True

    def pair_entries(self, *species):
        return tuple(self.pairs.get(canonical_key(species), ()))

    def bond_entries(self, *species):
        return tuple(self.bonds.get(canonical_key(species), ()))

    def angle_entries(self, *species):
        return tuple(self.angles.get(canonical_key(species), ()))

    def dihedral_entries(self, *species):
        return tuple(self.dihedrals.get(canonical_key(species), ()))

    @property
    def max_cutoff(self):
        """Largest cutoff radius of the pair entries."""
        radii = [entry.cutoff.radius for entries in self.pairs.values() for entry in entries]
        return max(radii) if len(radii) > 0 else 0.0

    def validate(self, species, topology=None):
        """
        Check that every pair of `species` that can occur in the
        system, and every bond, angle and dihedral of the `topology`,
        resolves to at least one entry.

        Raise `ConfigurationError` otherwise.
        """
        species = list(species)
        counts = {}
        for s in species:
            counts[s] = counts.get(s, 0) + 1
        distinct = sorted(counts, key=str)
        for a, b in itertools.combinations_with_replacement(distinct, 2):
            if a == b and counts[a] < 2:
                continue
            if len(self.pair_entries(a, b)) == 0:
                raise ConfigurationError('missing interaction for pair ({}, {})'.format(a, b))

        if topology is None:
            return
        checks = [('bond', topology.bonds, self.bond_entries),
                  ('angle', topology.angles, self.angle_entries),
                  ('dihedral', topology.dihedrals, self.dihedral_entries)]
        for what, terms, lookup in checks:
            for key in set(tuple(species[i] for i in term) for term in terms):
                if len(lookup(*key)) == 0:
                    raise ConfigurationError('missing interaction for {} {}'.format(what, key))

    def tail_correction(self, volume, composition):
        """
        Return the tail corrections `(energy, pressure)` for a system
        of given `volume` and `composition`, a dict mapping species to
        number of particles.

        The density beyond the cutoff is assumed uniform.
        Intra-molecular entries do not contribute.
        """
        energy, pressure = 0.0, 0.0
        for (a, b), entries in self.pairs.items():
            na, nb = composition.get(a, 0), composition.get(b, 0)
            # Sum over ordered pairs of species
            npairs = na * nb if a == b else 2 * na * nb
            if npairs == 0:
                continue
            for entry in entries:
                if entry.tail_integrals is None or entry.restriction.kind == 'intramolecular':
                    continue
                energy_integral, virial_integral = entry.tail_integrals
                energy += 2 * numpy.pi * npairs / volume * energy_integral
                pressure += 2 * numpy.pi * npairs / (3 * volume**2) * virial_integral
        return energy, pressure

    def report(self):
        txt = ''
        for db in (self.pairs, self.bonds, self.angles, self.dihedrals):
            for entries in db.values():
                for entry in entries:
                    txt += entry.report()
        return txt
