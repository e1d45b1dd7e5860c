#!/usr/bin/env python3
"""
Interactive Text Interview for App Concepts

Run directly in your terminal:
    python3 run_interactive_interview.py [--provider groq] [--max-rounds 3] [-o outputs]

Same as the installed `concept-interview` command; handy from a checkout.
"""

import sys
from pathlib import Path

# Add project to path
sys.path.insert(0, str(Path(__file__).parent))

from concept_interview.cli import main


if __name__ == "__main__":
    main()
