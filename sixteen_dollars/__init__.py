"""Daily time budget: sixteen dollars, one per waking hour."""

__version__ = "0.1.0"


def main(*args, **kwargs):
    from .app import main as _main
    return _main(*args, **kwargs)


__all__ = ["main", "__version__"]
