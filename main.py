#!/usr/bin/env python3
"""
Tree Maker - Main Entry Point

Run this file directly or use the installed ``tree-maker`` command.

Usage:
    python main.py CONFIG.json -o tree.glb
    python main.py --version
"""

import sys


def main():
    """Main entry point for Tree Maker."""
    if "--version" in sys.argv[1:]:
        from treemaker import __version__
        print(f"Tree Maker v{__version__}")
        return 0

    from treemaker.cli import main as cli_main
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
