"""
Utility helpers.

Import directly from the submodules; keeping this file empty avoids import
cycles with ``ziria.errors``.
"""
