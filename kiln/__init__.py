"""
kiln — project scaffolding from parameterized template directories.
"""

__version__ = "0.1.0"
