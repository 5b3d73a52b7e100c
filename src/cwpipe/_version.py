"""
Package version.

Kept in a dedicated module so build tooling can read it without importing the
package.
"""

__version__ = "0.1.0"
