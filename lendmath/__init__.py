"""Fixed-point arithmetic, borrow rate curves and oracle price validation for lending markets."""

__version__ = "0.1.0"