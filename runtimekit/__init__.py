"""
RuntimeKit - managed Node.js runtime acquisition and npm execution.

Subpackages:
    core: Platform detection, downloads, archives, locking, errors
    node: Installer, npm runner, version queries and the runtime facade
    cli:  Command-line interface
"""

__version__ = "0.1.0"
