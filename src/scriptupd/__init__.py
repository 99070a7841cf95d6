"""scriptupd: update checking for installed userscripts."""

__version__ = "0.1.0"
