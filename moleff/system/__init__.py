# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
The physical system at hand.

A `System` is made of point `Particle` instances, optionally enclosed
in an orthorhombic `Cell`, and connected by a bonded `Topology`.
"""

import logging
from moleff.core.utils import NullHandler
from .particle import Particle
from .cell import Cell
from .topology import Topology
from .system import System
logging.getLogger(__name__).addHandler(NullHandler())
