"""TrendWise core.

Turns "what is popular right now" signals from several unreliable sources into
ranked topic candidates and drives a generative backend to write articles about
the best of them.
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
