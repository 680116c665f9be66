#!/usr/bin/env python3
"""
Quick Start - Store nested settings in SQLite.

Usage:
    python examples/quick_start.py [sqlite:///settings.db]
"""

import logging
import sys

from nestkv import connect


def main():
    url = sys.argv[1] if len(sys.argv) > 1 else "sqlite:///:memory:"

    with connect(url) as db:
        db.set("app.ui.theme", "dark")
        db.set("app.ui.font_size", 14)
        db.set("mail", {"host": "smtp.example.com", "port": 587})

        print(f"app:        {db.get('app')}")
        print(f"theme:      {db.get('app.ui.theme')}")
        print(f"batch:      {db.get_multiple(['app.ui.font_size', 'mail.port', 'missing'])}")

        db.forget("app.ui.theme")
        print(f"after forget: {db.get('app')}")

        print(f"all:        {db.all()}")
        print(f"flushed:    {db.flush()}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    main()
