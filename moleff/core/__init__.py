# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

"""
Global variables.
"""

__author__ = "Daniele Coslovich <daniele.coslovich@umontpellier.fr>"

from ._version import __version__

ndim = 3
"""Number of spatial dimensions."""

ELCC = 7.197589831304046
"""
4 * pi * epsilon_0 in (angstrom, femtosecond, amu, elementary charge)
units. Use `prefactor=1/ELCC` in `Ewald` to get energies in these units.
"""
