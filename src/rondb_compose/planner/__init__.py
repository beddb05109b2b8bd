"""
Planner package.

This makes the planner folder an explicit package so both Python and mypy
resolve modules consistently.
"""

from rondb_compose.planner.planner import NodeGroupPlacement, PlannerConfig, TopologyPlanner

__all__ = ["NodeGroupPlacement", "PlannerConfig", "TopologyPlanner"]
