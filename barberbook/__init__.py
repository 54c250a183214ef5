"""
barberbook - slot availability and booking lifecycle for barbershops.
"""

__version__ = "0.1.0"
