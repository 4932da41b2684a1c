"""Group scheduling that maximises unique contacts with simulated annealing."""

__version__ = "0.1.0"