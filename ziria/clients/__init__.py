# ziria/clients/__init__.py

"""
Lazy imports - import directly from specific modules to avoid circular dependencies.

This file should remain minimal to prevent import cycles
"""
