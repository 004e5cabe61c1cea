#!/usr/bin/env python3
"""Script entry point.

Keeps the `python ewhist.py <values.txt>` UX, while the implementation lives
in the `ewhist` package.
"""

from ewhist.cli import main


if __name__ == '__main__':
    main()
