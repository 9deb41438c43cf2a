"""
Cadence - critical path scheduling engine for project task graphs.
"""
