"""
py_terrain: heightfield and material-weight terrain editing.
"""

__version__ = "0.1.0"
