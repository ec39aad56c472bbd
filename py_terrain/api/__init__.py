"""
HTTP interface for the terrain editor.
"""
