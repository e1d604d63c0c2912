"""Didactic simulation of nicotine acting on the dopamine/GABA reward circuit."""

__version__ = "1.1.0"
