"""
Kestrel Module Entry Point
===========================

Allows running the Kestrel CLI via: python -m kestrel
"""

from kestrel.cli import main

if __name__ == "__main__":
    main()
