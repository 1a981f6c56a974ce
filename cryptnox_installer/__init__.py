"""cryptnox-installer — install and manage the cryptnox CLI on Linux hosts."""

__version__ = "0.1.0"
