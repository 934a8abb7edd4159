"""
Helpers shared by the planners: geometry, keyed priority queue, YAML
configuration loading and matplotlib drawing.
"""
