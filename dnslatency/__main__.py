"""
Entry point for running dnslatency as a module.

Usage: python -m dnslatency [OPTIONS] COMMAND [ARGS]...
"""

from .cli import main

if __name__ == "__main__":
    main()
