"""
Report package: clipboard export rendering and export settings.
"""
