"""
Scoring implementations.

Provides ScoringCurve implementations and the mapping from a validated
tournament to per-player point awards.

Available implementations:
- DecayCurve: Geometric decay over finishing position
- LinearCurve: Linear fall-off to zero over a fixed field size
"""

from .curves import DecayCurve, LinearCurve
from .points import age_factor, assign_points

__all__ = ["DecayCurve", "LinearCurve", "age_factor", "assign_points"]
