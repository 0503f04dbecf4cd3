"""
depsource version information.

The version is read by the build backend (``tool.setuptools.dynamic``)
and reported by ``depsource --version``. Versions follow PEP 440.
"""

__version__ = "0.1.0.dev0"
