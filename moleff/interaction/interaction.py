# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
Total interaction of a molecular system.

`Interaction` computes the energy, the forces and the virial of a
system from an `InteractionRegistry` of pair and bonded terms and an
optional `Ewald` summation for electrostatics. Candidate interacting
pairs are provided by the caller as triplets (i, j, rij), where rij is
the minimum image of r_i - r_j and |rij| is within the largest
relevant cutoff. No periodic boundary conditions are applied here.
"""

import collections
import logging

import numpy

from moleff.core.errors import NumericError
from moleff.core.utils import canonical_key, parallel_reduce
from moleff.system.topology import Topology

_log = logging.getLogger(__name__)

Result = collections.namedtuple('Result', ['energy', 'forces', 'virial'])


class InteractionBase(object):

    def __init__(self):
        self.variables = {'position': 'particle.position'}
        """
        Maps the arguments of `compute()` to the fields that
        `System.dump()` provides for them. A field may end with
        `:<dtype>` to request a numpy data type, e.g.
        `particle.charge:float64`.
        """
        self.observable = ['energy', 'forces', 'virial']
        for observable in self.observable:
            setattr(self, observable, None)

    def compute(self, observable, position):
        """
        Reset the observables before computing `observable`.

        The arguments of subclasses follow the keys of `variables`.
        """
        assert observable in self.observable + [None], \
            'unsupported observable {}'.format(observable)

        N, ndim = position.shape
        self.energy = 0.0
        if observable != 'energy':
            self.forces = numpy.zeros_like(position)
            self.virial = numpy.zeros((ndim, ndim))


def _group(keys):
    """Return a dict mapping each distinct key to the indices where it occurs."""
    groups = collections.defaultdict(list)
    for idx, key in enumerate(keys):
        groups[key].append(idx)
    return {key: numpy.array(idx, dtype=int) for key, idx in groups.items()}


def _pair_arrays(pairs):
    """Return the candidate `pairs` as arrays i, j and rij."""
    if pairs is None:
        return numpy.zeros(0, dtype=int), numpy.zeros(0, dtype=int), numpy.zeros((0, 3))
    if isinstance(pairs, tuple) and len(pairs) == 3 and isinstance(pairs[0], numpy.ndarray):
        i, j, rij = pairs
    else:
        pairs = list(pairs)
        if len(pairs) == 0:
            return _pair_arrays(None)
        i, j, rij = zip(*pairs)
    i = numpy.asarray(i, dtype=int)
    j = numpy.asarray(j, dtype=int)
    rij = numpy.asarray(rij, dtype=float).reshape(len(i), 3)
    return i, j, rij


class Interaction(InteractionBase):

    def __init__(self, registry, species, topology=None, ewald=None,
                 charges=None, workers=1, displacement=None):
        """
        The interaction is calculated given an `InteractionRegistry`.

        - `species` is the list of species of the particles, used to
        validate the registry once and for all.
        - `topology` is the bonded `Topology` of the system. If
        `None`, there are no bonds and every particle is a molecule.
        - `ewald` is an optional `Ewald` instance for electrostatics.
        - `charges` is a dict mapping species to charges, used for
        particles whose charge is unset (`None` or nan).
        - `workers` is the number of threads among which pairs and
        reciprocal vectors are split.
        - `displacement(ri, rj)` returns the separation vectors of
        bonded particles, e.g. applying the minimum image convention.
        It defaults to `ri - rj`.
        """
        InteractionBase.__init__(self)
        self.variables = {'position': 'particle.position',
                          'charge': 'particle.charge:float64',
                          'box': 'cell.side',
                          'pairs': 'pairs'}
        self.registry = registry
        self.species = list(species)
        self.topology = topology if topology is not None else Topology(len(self.species))
        self.ewald = ewald
        self.charges = dict(charges) if charges is not None else {}
        self.workers = workers
        if displacement is None:
            displacement = numpy.subtract
        self.displacement = displacement

        registry.freeze()
        registry.validate(self.species, self.topology)

        # Integer codes of species and of unordered pairs of species
        distinct = sorted(set(self.species), key=str)
        self._code = numpy.array([distinct.index(s) for s in self.species], dtype=int)
        self._distinct = distinct
        self._pair_entries = {}
        for a in range(len(distinct)):
            for b in range(a, len(distinct)):
                self._pair_entries[a * len(distinct) + b] = \
                    registry.pair_entries(distinct[a], distinct[b])

        # Bonded terms grouped by species
        self._bonded = []
        for terms, lookup in [(self.topology.bonds, registry.bond_entries),
                              (self.topology.angles, registry.angle_entries),
                              (self.topology.dihedrals, registry.dihedral_entries)]:
            keys = [canonical_key([self.species[i] for i in term]) for term in terms]
            groups = []
            for key, idx in _group(keys).items():
                groups.append((numpy.array(terms, dtype=int)[idx], lookup(*key)))
            self._bonded.append(groups)

        self._species_charge = numpy.array([self.charges.get(s, 0.0) for s in self.species], dtype=float)
        self.composition = dict(collections.Counter(self.species))
        _log.info('interaction setup: %d particles, %d species, cutoff %g',
                  len(self.species), len(distinct), self.cutoff)

    @property
    def cutoff(self):
        """Largest cutoff of all the terms of the interaction."""
        rc = self.registry.max_cutoff
        if self.ewald is not None:
            rc = max(rc, self.ewald.cutoff)
        return rc

    def __str__(self):
        return self.report()

    def report(self):
        txt = self.registry.report()
        if self.ewald is not None:
            txt += self.ewald.report()
        return txt

    def compute(self, observable, position, pairs=None, charge=None, box=None):
        """
        Compute interaction between particles at `position`, given the
        candidate interacting `pairs`, the particle `charge` and the
        orthorhombic `box` sides.
        """
        InteractionBase.compute(self, observable, position)
        result = self.evaluate(position, pairs, charge, box)
        self.energy = result.energy
        if observable != 'energy':
            self.forces = result.forces
            self.virial = result.virial

    def tail_correction(self, volume, composition=None):
        """
        Return the tail corrections `(energy, pressure)` in the given
        `volume`. The `composition` defaults to the one of the species
        given at setup.
        """
        if composition is None:
            composition = self.composition
        return self.registry.tail_correction(volume, composition)

    def resolve_charges(self, charge=None):
        """
        Return the particle charges, using the charges table for
        unset charges.
        """
        if charge is None:
            return self._species_charge.copy()
        charge = numpy.array(charge, dtype=float)
        return numpy.where(numpy.isnan(charge), self._species_charge, charge)

    def evaluate(self, position, pairs=None, charge=None, box=None):
        """
        Return a `Result` tuple with the total energy, the (N, 3)
        forces and the (3, 3) virial tensor of the configuration.

        Raise `NumericError` if the energy or forces are not finite.
        """
        position = numpy.asarray(position, dtype=float)
        N = len(self.species)
        if position.shape != (N, 3):
            raise ValueError('expected positions of shape {} (got {})'.format((N, 3), position.shape))
        i, j, rij = _pair_arrays(pairs)

        with numpy.errstate(divide='ignore', over='ignore', invalid='ignore'):
            energy, forces, virial = self._pairs(N, i, j, rij)
            for groups, compute in zip(self._bonded, [self._bonds, self._angles, self._dihedrals]):
                for terms, entries in groups:
                    result = compute(N, position, terms, entries)
                    energy += result[0]
                    forces += result[1]
                    virial += result[2]

            if self.ewald is not None:
                charge = self.resolve_charges(charge)
                result = self.ewald.compute(position, charge, box, i, j, rij,
                                            self.topology, self.displacement,
                                            self.workers)
                energy += result[0]
                forces += result[1]
                virial += result[2]

        if box is not None:
            volume = numpy.prod(box)
            tail_energy, tail_pressure = self.tail_correction(volume)
            energy += tail_energy
            virial += volume * tail_pressure * numpy.eye(3)

        if not numpy.isfinite(energy):
            raise NumericError('non-finite potential energy {}'.format(energy))
        if not numpy.all(numpy.isfinite(forces)):
            bad = numpy.where(~numpy.all(numpy.isfinite(forces), axis=1))[0]
            raise NumericError('non-finite forces on particles {}'.format(list(bad)))
        return Result(float(energy), forces, virial)

    def _pairs(self, N, i, j, rij):
        if len(i) == 0:
            return 0.0, numpy.zeros((N, 3)), numpy.zeros((3, 3))

        ncodes = len(self._distinct)
        ci, cj = self._code[i], self._code[j]
        key = numpy.minimum(ci, cj) * ncodes + numpy.maximum(ci, cj)
        r = numpy.sum(rij**2, axis=1)**0.5
        bond_distance = self.topology.bond_distance(i, j)
        same_molecule = self.topology.same_molecule(i, j)

        def chunk(idx):
            energy = 0.0
            forces = numpy.zeros((N, 3))
            virial = numpy.zeros((3, 3))
            for code in numpy.unique(key[idx]):
                group = idx[key[idx] == code]
                for entry in self._pair_entries[code]:
                    included, scale = entry.restriction.information(bond_distance[group],
                                                                    same_molecule[group])
                    mask = included & ~entry.cutoff.is_zero(r[group])
                    select = group[mask]
                    if len(select) == 0:
                        continue
                    u, f = entry.compute(r[select])
                    u = u * scale[mask]
                    f = f * scale[mask]
                    energy += numpy.sum(u)
                    fvec = (f / r[select])[:, numpy.newaxis] * rij[select]
                    for axis in range(3):
                        forces[:, axis] += numpy.bincount(i[select], weights=fvec[:, axis], minlength=N)
                        forces[:, axis] -= numpy.bincount(j[select], weights=fvec[:, axis], minlength=N)
                    virial += numpy.dot(rij[select].T, fvec)
            return energy, forces, virial

        return parallel_reduce(chunk, len(i), self.workers)

    def _bonds(self, N, position, terms, entries):
        i, j = terms[:, 0], terms[:, 1]
        rij = self.displacement(position[i], position[j])
        r = numpy.sum(rij**2, axis=1)**0.5
        energy, f = 0.0, numpy.zeros(len(r))
        for entry in entries:
            u_entry, f_entry = entry.compute(r)
            energy += numpy.sum(u_entry)
            f = f + f_entry
        fi = (f / r)[:, numpy.newaxis] * rij
        forces = _accumulate(N, (i, fi), (j, -fi))
        return energy, forces, numpy.dot(rij.T, fi)

    def _angles(self, N, position, terms, entries):
        i, j, k = terms[:, 0], terms[:, 1], terms[:, 2]
        a = self.displacement(position[i], position[j])
        b = self.displacement(position[k], position[j])
        na = numpy.sum(a**2, axis=1)**0.5
        nb = numpy.sum(b**2, axis=1)**0.5
        cos = numpy.clip(numpy.sum(a * b, axis=1) / (na * nb), -1.0, 1.0)
        sin = numpy.sum(numpy.cross(a, b)**2, axis=1)**0.5 / (na * nb)
        theta = numpy.arccos(cos)
        energy, f = 0.0, numpy.zeros(len(theta))
        for entry in entries:
            u_entry, f_entry = entry.compute(theta)
            energy += numpy.sum(u_entry)
            f = f + f_entry
        # On linear angles the gradient of theta has no direction. The
        # force must vanish there, as at the minimum of harmonic(x0=pi).
        linear = sin < 1e-8
        if numpy.any(linear & (numpy.abs(f) > 1e-6)):
            bad = [tuple(term) for term in terms[linear & (numpy.abs(f) > 1e-6)]]
            raise NumericError('undefined forces on linear angles {}'.format(bad))
        f = numpy.where(linear, 0.0, f)
        sin = numpy.where(linear, 1.0, sin)
        # Derivatives of theta with respect to r_i and r_k
        dtheta_i = - (b / (na * nb)[:, numpy.newaxis] - (cos / na**2)[:, numpy.newaxis] * a) / sin[:, numpy.newaxis]
        dtheta_k = - (a / (na * nb)[:, numpy.newaxis] - (cos / nb**2)[:, numpy.newaxis] * b) / sin[:, numpy.newaxis]
        fi = f[:, numpy.newaxis] * dtheta_i
        fk = f[:, numpy.newaxis] * dtheta_k
        forces = _accumulate(N, (i, fi), (k, fk), (j, - fi - fk))
        virial = numpy.dot(a.T, fi) + numpy.dot(b.T, fk)
        return energy, forces, virial

    def _dihedrals(self, N, position, terms, entries):
        # Notation and derivatives follow Blondel and Karplus,
        # J. Comput. Chem. 17, 1132 (1996)
        i, j, k, l = terms[:, 0], terms[:, 1], terms[:, 2], terms[:, 3]
        F = self.displacement(position[i], position[j])
        G = self.displacement(position[j], position[k])
        H = self.displacement(position[l], position[k])
        A = numpy.cross(F, G)
        B = numpy.cross(H, G)
        A2 = numpy.sum(A**2, axis=1)
        B2 = numpy.sum(B**2, axis=1)
        nG = numpy.sum(G**2, axis=1)**0.5
        phi = numpy.arctan2(numpy.sum(numpy.cross(B, A) * G, axis=1) / nG,
                            numpy.sum(A * B, axis=1))
        energy, f = 0.0, numpy.zeros(len(phi))
        for entry in entries:
            u_entry, f_entry = entry.compute(phi)
            energy += numpy.sum(u_entry)
            f = f + f_entry
        FG = numpy.sum(F * G, axis=1)
        HG = numpy.sum(H * G, axis=1)
        dA = (nG / A2)[:, numpy.newaxis] * A
        dB = (nG / B2)[:, numpy.newaxis] * B
        cA = (FG / (A2 * nG))[:, numpy.newaxis] * A
        cB = (HG / (B2 * nG))[:, numpy.newaxis] * B
        fi = f[:, numpy.newaxis] * (- dA)
        fj = f[:, numpy.newaxis] * (dA + cA - cB)
        fk = f[:, numpy.newaxis] * (cB - cA - dB)
        fl = f[:, numpy.newaxis] * dB
        forces = _accumulate(N, (i, fi), (j, fj), (k, fk), (l, fl))
        virial = numpy.dot(F.T, fi) - numpy.dot(G.T, fk) + numpy.dot((H - G).T, fl)
        return energy, forces, virial


def _accumulate(N, *contributions):
    """Sum per-term force vectors onto an (N, 3) array of particles."""
    forces = numpy.zeros((N, 3))
    for idx, values in contributions:
        for axis in range(3):
            forces[:, axis] += numpy.bincount(idx, weights=values[:, axis], minlength=N)
    return forces
