"""
Library of potentials.

`Potential` instances are built on top of plain functions that return
the energy and the generalized force. Each function takes the
coordinate `x` (a distance for pair and bond terms, an angle for
angle and dihedral terms) as first argument plus the potential
parameters as keyword arguments, and returns the tuple (u, f) where

- u = u(x)
- f = - du/dx

All functions accept scalars as well as numpy arrays.

Example:
-------

The Lennard-Jones potential calculated at unit distance:

    u, f = lennard_jones(1.0, epsilon=1.0, sigma=1.0)

Functions named `<potential>_tail` return the integrals needed by
tail corrections beyond a cutoff `rc`, namely

- int_rc^inf u(r) r^2 dr
- int_rc^inf f(r) r^3 dr
"""

import numpy

__all__ = ['null', 'lennard_jones', 'harmonic', 'buckingham',
           'born_mayer_huggins', 'morse', 'cosine_harmonic', 'torsion']

aliases = {'lj': 'lennard_jones',
           'born': 'born_mayer_huggins',
           'buck': 'buckingham'}


def null(x):
    """
    Null potential.

    u(x) = 0
    """
    zero = numpy.zeros_like(numpy.asarray(x, dtype=float))
    return zero, zero.copy()


def null_tail(rc):
    return 0.0, 0.0


def lennard_jones(x, epsilon, sigma):
    """
    Lennard-Jones potential.

    u(r) = 4 * epsilon * [(sigma/r)^12 - (sigma/r)^6]
    """
    s6 = (sigma / x)**6
    u = 4 * epsilon * (s6**2 - s6)
    f = 24 * epsilon * (2 * s6**2 - s6) / x
    return u, f


def lennard_jones_tail(rc, epsilon, sigma):
    s3 = (sigma / rc)**3
    s9 = s3**3
    energy = 4 * epsilon * sigma**3 * (s9 / 9 - s3 / 3)
    virial = 24 * epsilon * sigma**3 * (2 * s9 / 9 - s3 / 3)
    return energy, virial


def harmonic(x, k, x0):
    """
    Harmonic potential.

    u(x) = 1/2 * k * (x - x0)^2
    """
    dx = x - x0
    return 0.5 * k * dx**2, - k * dx


def buckingham(x, A, C, rho):
    """
    Buckingham potential.

    u(r) = A * exp(-r/rho) - C / r^6
    """
    exp = A * numpy.exp(- x / rho)
    r6 = x**6
    return exp - C / r6, exp / rho - 6 * C / (r6 * x)


def _exponential_integrals(rc, rho):
    # int_rc^inf exp(-(r-rc)/rho) r^2 dr and r^3 dr
    i2 = rho * (rc**2 + 2 * rho * rc + 2 * rho**2)
    i3 = rho * (rc**3 + 3 * rho * rc**2 + 6 * rho**2 * rc + 6 * rho**3)
    return i2, i3


def buckingham_tail(rc, A, C, rho):
    i2, i3 = _exponential_integrals(rc, rho)
    prefactor = A * numpy.exp(- rc / rho)
    energy = prefactor * i2 - C / (3 * rc**3)
    virial = prefactor * i3 / rho - 2 * C / rc**3
    return energy, virial


def born_mayer_huggins(x, A, C, D, sigma, rho):
    """
    Born-Mayer-Huggins potential.

    u(r) = A * exp((sigma - r)/rho) - C / r^6 + D / r^8
    """
    exp = A * numpy.exp((sigma - x) / rho)
    r6 = x**6
    r8 = r6 * x**2
    u = exp - C / r6 + D / r8
    f = exp / rho - 6 * C / (r6 * x) + 8 * D / (r8 * x)
    return u, f


def born_mayer_huggins_tail(rc, A, C, D, sigma, rho):
    i2, i3 = _exponential_integrals(rc, rho)
    prefactor = A * numpy.exp((sigma - rc) / rho)
    energy = prefactor * i2 - C / (3 * rc**3) + D / (5 * rc**5)
    virial = prefactor * i3 / rho - 2 * C / rc**3 + 8 * D / (5 * rc**5)
    return energy, virial


def morse(x, depth, a, x0):
    """
    Morse potential, vanishing at large distances.

    u(r) = depth * [(1 - exp(-a(r - x0)))^2 - 1]
    """
    exp = numpy.exp(- a * (x - x0))
    return depth * ((1 - exp)**2 - 1), - 2 * a * depth * exp * (1 - exp)


def cosine_harmonic(x, k, x0):
    """
    Cosine harmonic potential for angles.

    u(x) = 1/2 * k * (cos(x) - cos(x0))^2
    """
    dcos = numpy.cos(x) - numpy.cos(x0)
    return 0.5 * k * dcos**2, k * dcos * numpy.sin(x)


def torsion(x, k, n, delta):
    """
    Periodic torsion potential for dihedral angles.

    u(x) = k * [1 + cos(n*x - delta)]
    """
    phase = n * x - delta
    return k * (1 + numpy.cos(phase)), k * n * numpy.sin(phase)
