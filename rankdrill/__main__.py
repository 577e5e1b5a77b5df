"""
Entry point for running rankdrill as a module.

Usage:
    python -m rankdrill [PATTERN]
    python -m rankdrill stats
    python -m rankdrill --help
"""
from .cli import main

if __name__ == "__main__":
    main()
