"""
Main module entry point.

Runs the headless forecast scheduler worker: python -m src.main
"""

from .worker import main

if __name__ == "__main__":
    main()
