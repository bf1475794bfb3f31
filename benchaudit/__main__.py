"""
Main entry point for benchaudit when run as a module.
Allows execution via: python -m benchaudit
"""

from benchaudit.cli import main

if __name__ == '__main__':
    main()
