#!/usr/bin/env python3
"""
tokenprobe: report a model's next-token probability for target strings.

example:
    python run_probe.py -m gpt2 -p "Hello my name is" -t " John, Bob"
"""

import sys

from tokenprobe.cli import main

if __name__ == "__main__":
    sys.exit(main())
