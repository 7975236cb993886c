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
Force-field evaluation core for molecular simulations.

Given particle positions, charges and bonded topology, `moleff`
computes the potential energy, the forces and the virial of a system
from a registry of pair, bonded and electrostatic interactions.
"""

import logging
from .core.utils import NullHandler
logging.getLogger(__name__).addHandler(NullHandler())
