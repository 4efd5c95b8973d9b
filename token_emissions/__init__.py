"""Token emissions engine.

Computes monthly token release schedules from vesting parameters and compares
unlock pressure, dilution and inflation across projects.
"""

__version__ = "0.1.0"
