"""Core contracts (Protocol).

Services depend on these structural contracts; concrete implementations can be
swapped or added without touching the code that runs them.
"""
