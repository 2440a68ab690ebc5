"""Visual form builder with submission collection and CSV export."""

__version__ = "0.1.0"
