"""
Shared numerics and reporting style.
"""
