"""checkperms — file permission auditor"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("checkperms")
except PackageNotFoundError:
    __version__ = "dev"

__author__ = "checkperms"
