"""
In-memory pool and factory for tests and simulation
"""

from .factory import SimpleFactory
from .pool import SimulatedPool
