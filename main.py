#!/usr/bin/env python3
"""GrappleTimer — entry point.

Run with:
    python main.py --preset "10×5:00/1:00"
    python -m grappletimer --round 300 --rest 60 --rounds 5
"""

from grappletimer.__main__ import main


if __name__ == "__main__":
    main()
