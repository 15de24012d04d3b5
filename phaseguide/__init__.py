"""phaseguide - phase-aware development workflow guidance for coding agents."""

__version__ = "0.1.0"
