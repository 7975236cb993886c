# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
Ewald summation for coulombic interactions.

The conditionally convergent coulombic sum is split in two absolutely
convergent sums, one in real space with the short-ranged kernel
erfc(alpha r) / r and the other in reciprocal space. The total energy
is

    E = E_real + E_kspace + E_self + E_correction

where E_self = - alpha / sqrt(pi) * sum_i q_i^2 removes the
interaction of each charge with its own screening cloud and
E_correction removes, for the pairs excluded (or scaled) by the
restriction, the part of their interaction implicitly counted in
reciprocal space.

References: Frenkel, D. & Smit, B. Understanding molecular
simulation (Academic press, 2002).
"""

import logging
import warnings

import numpy
from scipy.special import erf, erfc

from moleff.core.errors import ConfigurationError, EwaldChargeWarning
from moleff.core.utils import parallel_reduce
from moleff.system.topology import Topology
from .restriction import Restriction

_log = logging.getLogger(__name__)


class Ewald(object):

    def __init__(self, cutoff, kmax, accuracy=None, alpha=None,
                 restriction=None, prefactor=1.0):
        """
        Ewald summation with real space `cutoff` and `kmax` reciprocal
        lattice vectors per axis.

        The splitting parameter `alpha` can be given explicitly.
        Otherwise, if `accuracy` is given, it is chosen such that
        erfc(alpha * cutoff) is about `accuracy`; the default is
        alpha = 3 * pi / (4 * cutoff).

        The `restriction` only applies to the real space part.

        `prefactor` multiplies all electrostatic energies, e.g. 1 /
        (4 pi epsilon_0) in the units of choice.
        """
        if not cutoff > 0:
            raise ConfigurationError('Ewald cutoff must be positive (got %s)' % cutoff)
        if int(kmax) != kmax or kmax < 1:
            raise ConfigurationError('Ewald kmax must be a positive integer (got %s)' % kmax)
        if alpha is not None:
            if not alpha > 0:
                raise ConfigurationError('Ewald alpha must be positive (got %s)' % alpha)
        elif accuracy is not None:
            if not 0 < accuracy < 1:
                raise ConfigurationError('Ewald accuracy must be in (0, 1) (got %s)' % accuracy)
            alpha = (- numpy.log(accuracy))**0.5 / cutoff
        else:
            alpha = 3 * numpy.pi / (4 * cutoff)
        self.cutoff = float(cutoff)
        self.kmax = int(kmax)
        self.alpha = float(alpha)
        self.restriction = Restriction.parse(restriction)
        self.prefactor = prefactor
        # Reciprocal lattice vectors are cached for the last box
        self._kspace_cache = (None, None)
        # Restricted pairs are cached for the last topology
        self._restricted_cache = (None, None)

    def __str__(self):
        return 'ewald'

    def report(self):
        return """\
coulomb: ewald
cutoff: {0.cutoff}
kmax: {0.kmax}
alpha: {0.alpha}
restriction: {0.restriction}
""".format(self)

    def kvectors(self, box):
        """
        Return the integer indices, the wave vectors and the weights
        exp(-k^2 / (4 alpha^2)) / k^2 of the reciprocal lattice
        vectors for an orthorhombic `box`.

        Only half of the vectors are kept, since k and -k contribute
        the same, and their weight is doubled. The vectors are
        spherically truncated at |k| = 2 pi kmax / max(box).
        """
        box = numpy.asarray(box, dtype=float)
        key = tuple(box)
        cached_key, data = self._kspace_cache
        if cached_key == key:
            return data

        if box.shape != (3, ) or numpy.any(box <= 0):
            raise ConfigurationError('Ewald summation needs an orthorhombic box (got %s)' % box)
        if self.cutoff > min(box) / 2:
            _log.warning('Ewald cutoff %g is too large for box %s, energy might be wrong',
                         self.cutoff, box)

        n = numpy.arange(-self.kmax, self.kmax + 1)
        nx, ny, nz = [x.flatten() for x in numpy.meshgrid(n, n, n, indexing='ij')]
        half = (nx > 0) | ((nx == 0) & (ny > 0)) | ((nx == 0) & (ny == 0) & (nz > 0))
        index = numpy.column_stack((nx, ny, nz))[half]
        k = index * (2 * numpy.pi / box)
        k2 = numpy.sum(k**2, axis=1)
        kcut = 2 * numpy.pi * self.kmax / max(box)
        keep = k2 <= kcut**2 * (1 + 1e-10)
        index, k, k2 = index[keep], k[keep], k2[keep]
        weight = 2 * numpy.exp(- k2 / (4 * self.alpha**2)) / k2
        data = (index, k, weight)
        self._kspace_cache = (key, data)
        _log.debug('ewald: %d reciprocal vectors for box %s', len(index), box)
        return data

    def _phases(self, position, box):
        # Phase factors exp(i 2 pi n x / L) for n = 0, ..., kmax, built
        # by recurrence from n = 1. Shape is (kmax + 1, N, 3).
        phases = numpy.empty((self.kmax + 1, ) + position.shape, dtype=complex)
        phases[0] = 1.0
        phases[1] = numpy.exp(2j * numpy.pi * position / box)
        for n in range(2, self.kmax + 1):
            phases[n] = phases[n - 1] * phases[1]
        return phases

    def _eikr(self, phases, n):
        # exp(i k.r) for the integer vectors n, shape (len(n), N).
        # nx is never negative in the half space.
        eikr = phases[n[:, 0], :, 0]
        for axis in (1, 2):
            e = phases[numpy.abs(n[:, axis]), :, axis]
            negative = n[:, axis] < 0
            e[negative] = numpy.conj(e[negative])
            eikr = eikr * e
        return eikr

    def structure_factors(self, position, charge, box):
        """
        Return the structure factors sum_i q_i exp(i k.r_i) over the
        reciprocal vectors of `kvectors(box)`.
        """
        position = numpy.asarray(position, dtype=float)
        box = numpy.asarray(box, dtype=float)
        index = self.kvectors(box)[0]
        return numpy.dot(self._eikr(self._phases(position, box), index), charge)

    def self_energy(self, charge):
        """Self-interaction contribution to the energy."""
        return - self.prefactor * self.alpha / numpy.pi**0.5 * numpy.sum(charge**2)

    def kspace(self, position, charge, box, workers=1):
        """
        Reciprocal space contribution to the energy, forces and
        virial. The work is split among `workers` over the reciprocal
        vectors.
        """
        position = numpy.asarray(position, dtype=float)
        box = numpy.asarray(box, dtype=float)
        index, k, weight = self.kvectors(box)
        phases = self._phases(position, box)
        factor = self.prefactor * 2 * numpy.pi / numpy.prod(box)
        alpha2 = self.alpha**2

        def chunk(idx):
            eikr = self._eikr(phases, index[idx])
            # Structure factors, shape (nk, )
            rho = numpy.dot(eikr, charge)
            rho2 = numpy.abs(rho)**2
            w = weight[idx]
            kk = k[idx]
            energy = factor * numpy.sum(w * rho2)
            im = numpy.imag(numpy.conj(eikr) * rho[:, numpy.newaxis])
            forces = - 2 * factor * charge[:, numpy.newaxis] * numpy.dot(im.T, w[:, numpy.newaxis] * kk)
            k2 = numpy.sum(kk**2, axis=1)
            coeff = factor * w * rho2
            outer = numpy.einsum('k,ka,kb->ab', coeff * 2 * (1 / k2 + 1 / (4 * alpha2)), kk, kk)
            virial = numpy.sum(coeff) * numpy.eye(3) - outer
            return energy, forces, virial

        if len(index) == 0:
            return 0.0, numpy.zeros_like(position), numpy.zeros((3, 3))
        return parallel_reduce(chunk, len(index), workers)

    def _pair_terms(self, charge, i, j, rij, scale=None, workers=1):
        # Pairs interact via erfc(alpha r) / r or, when `scale` is
        # given, via (scale - erf(alpha r)) / r
        nparticles = len(charge)
        if len(i) == 0:
            return 0.0, numpy.zeros((nparticles, 3)), numpy.zeros((3, 3))
        r = numpy.sum(rij**2, axis=1)**0.5
        qiqj = charge[i] * charge[j] * self.prefactor
        alpha = self.alpha

        def chunk(idx):
            forces = numpy.zeros((nparticles, 3))
            rr = r[idx]
            gauss = 2 * alpha / numpy.pi**0.5 * numpy.exp(- (alpha * rr)**2)
            if scale is None:
                kernel = erfc(alpha * rr)
            else:
                kernel = scale[idx] - erf(alpha * rr)
            u = qiqj[idx] * kernel / rr
            f = qiqj[idx] * (kernel / rr**2 + gauss / rr)
            fvec = (f / rr)[:, numpy.newaxis] * rij[idx]
            for axis in range(3):
                forces[:, axis] += numpy.bincount(i[idx], weights=fvec[:, axis], minlength=nparticles)
                forces[:, axis] -= numpy.bincount(j[idx], weights=fvec[:, axis], minlength=nparticles)
            virial = numpy.dot(rij[idx].T, fvec)
            return numpy.sum(u), forces, virial

        return parallel_reduce(chunk, len(i), workers)

    def real_space(self, charge, i, j, rij, workers=1):
        """
        Screened real space contribution to the energy, forces and
        virial of the candidate pairs (i, j, rij) within the cutoff.
        """
        r = numpy.sum(rij**2, axis=1)**0.5
        select = (r <= self.cutoff) & (charge[i] * charge[j] != 0)
        return self._pair_terms(charge, i[select], j[select], rij[select], workers=workers)

    def restricted_pairs(self, topology):
        """
        Return the arrays `(i, j, scale)` of all the pairs whose
        interaction is excluded (scale 0) or scaled by the
        restriction, whatever their distance.

        The pairs are cached for the last `topology`.
        """
        cached, data = self._restricted_cache
        if cached is topology:
            return data

        kind = self.restriction.kind
        if kind == 'none':
            i, j = numpy.zeros(0, dtype=int), numpy.zeros(0, dtype=int)
        elif kind == 'intermolecular':
            i, j = topology.molecule_pairs()
        elif kind == 'intramolecular':
            i, j = numpy.triu_indices(topology.size, 1)
        else:
            i, j = topology.related_pairs()
        i = numpy.asarray(i, dtype=int)
        j = numpy.asarray(j, dtype=int)
        included, scale = self.restriction.information(topology.bond_distance(i, j),
                                                       topology.same_molecule(i, j))
        restricted = ~included | (scale != 1.0)
        scale = numpy.where(included, scale, 0.0)
        data = (i[restricted], j[restricted], scale[restricted])
        self._restricted_cache = (topology, data)
        _log.debug('ewald: %d restricted pairs', len(data[0]))
        return data

    def correction(self, position, charge, topology, displacement=numpy.subtract, workers=1):
        """
        Contribution of the pairs excluded or scaled by the
        restriction. It removes the part of their interaction that is
        implicitly counted in reciprocal space.

        Separation vectors are given by `displacement(ri, rj)`.
        """
        position = numpy.asarray(position, dtype=float)
        i, j, scale = self.restricted_pairs(topology)
        if len(i) == 0:
            return self._pair_terms(charge, i, j, None)
        rij = numpy.asarray(displacement(position[i], position[j]), dtype=float)
        return self._pair_terms(charge, i, j, rij, scale, workers)

    def compute(self, position, charge, box, i, j, rij, topology=None,
                displacement=None, workers=1):
        """
        Return the total electrostatic energy, forces and virial.

        The candidate pairs (i, j, rij) provide the screened real
        space interactions within the cutoff. The pairs excluded or
        scaled by the restriction are taken from the `topology`
        instead, whatever their distance, with separations given by
        `displacement(ri, rj)` (default `ri - rj`).
        """
        if box is None:
            raise ConfigurationError('Ewald summation needs a periodic box')
        position = numpy.asarray(position, dtype=float)
        charge = numpy.asarray(charge, dtype=float)
        total_charge = numpy.sum(charge)
        if abs(total_charge) > 1e-8:
            warnings.warn('Ewald summation of a system with net charge %g' % total_charge,
                          EwaldChargeWarning)
        if topology is None:
            topology = Topology(len(charge))
        if displacement is None:
            displacement = numpy.subtract

        i = numpy.asarray(i, dtype=int)
        j = numpy.asarray(j, dtype=int)
        rij = numpy.asarray(rij, dtype=float).reshape(len(i), 3)
        if len(i) > 0:
            # Restricted candidate pairs are handled by the correction
            included, scale = self.restriction.information(topology.bond_distance(i, j),
                                                           topology.same_molecule(i, j))
            plain = included & (scale == 1.0)
            i, j, rij = i[plain], j[plain], rij[plain]

        real = self.real_space(charge, i, j, rij, workers)
        correction = self.correction(position, charge, topology, displacement, workers)
        kspace = self.kspace(position, charge, box, workers)
        energy = real[0] + correction[0] + kspace[0] + self.self_energy(charge)
        forces = real[1] + correction[1] + kspace[1]
        virial = real[2] + correction[2] + kspace[2]
        return energy, forces, virial

    def move_cost(self, position, charge, box, idxes, newpos, topology=None,
                  displacement=None, rho=None):
        """
        Return the change of electrostatic energy when the particles
        `idxes` (distinct indices) move from `position[idxes]` to
        `newpos`.

        Unrestricted pairs interact within the cutoff with the
        minimum image convention, restricted pairs are treated as in
        `compute()`. The structure factors `rho` of the current
        configuration, as returned by `structure_factors()`, can be
        kept by the caller across moves so that only the phases of
        the moved particles are computed here.
        """
        position = numpy.asarray(position, dtype=float)
        charge = numpy.asarray(charge, dtype=float)
        box = numpy.asarray(box, dtype=float)
        idxes = numpy.atleast_1d(numpy.asarray(idxes, dtype=int))
        newpos = numpy.asarray(newpos, dtype=float).reshape(len(idxes), 3)
        if topology is None:
            topology = Topology(len(charge))
        if displacement is None:
            displacement = numpy.subtract
        nparticles = len(charge)
        new = position.copy()
        new[idxes] = newpos

        # Pairs of a moved particle with any other one, each counted once
        moved = numpy.zeros(nparticles, dtype=bool)
        moved[idxes] = True
        i = numpy.repeat(idxes, nparticles)
        j = numpy.tile(numpy.arange(nparticles), len(idxes))
        keep = (i != j) & (~moved[j] | (i < j))
        i, j = i[keep], j[keep]
        qiqj = charge[i] * charge[j] * self.prefactor
        included, scale = self.restriction.information(topology.bond_distance(i, j),
                                                       topology.same_molecule(i, j))
        plain = included & (scale == 1.0)
        scale = numpy.where(included, scale, 0.0)[~plain]
        ip, jp, qp = i[plain], j[plain], qiqj[plain]
        ir, jr, qr = i[~plain], j[~plain], qiqj[~plain]

        def real_energy(x):
            rij = x[ip] - x[jp]
            rij -= numpy.rint(rij / box) * box
            r = numpy.sum(rij**2, axis=1)**0.5
            inside = r <= self.cutoff
            energy = numpy.sum(qp[inside] * erfc(self.alpha * r[inside]) / r[inside])
            if len(ir) > 0:
                rij = numpy.asarray(displacement(x[ir], x[jr]), dtype=float)
                r = numpy.sum(rij**2, axis=1)**0.5
                energy += numpy.sum(qr * (scale - erf(self.alpha * r)) / r)
            return energy

        delta_real = real_energy(new) - real_energy(position)

        index, k, weight = self.kvectors(box)
        if rho is None:
            rho = self.structure_factors(position, charge, box)
        q = charge[idxes]
        delta_rho = numpy.dot(self._eikr(self._phases(newpos, box), index), q) - \
            numpy.dot(self._eikr(self._phases(position[idxes], box), index), q)
        factor = self.prefactor * 2 * numpy.pi / numpy.prod(box)
        delta_kspace = factor * numpy.sum(weight * (numpy.abs(rho + delta_rho)**2 - numpy.abs(rho)**2))
        return delta_real + delta_kspace
