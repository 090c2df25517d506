#!/usr/bin/env python3
"""
VPP binary API binding generator

Parses VPP binary API JSON files (*.api.json) and generates Python bindings:
  1. dataclasses with construct wire layouts for types, unions and messages
  2. IntEnum classes for enums, alias classes for aliases
  3. an abstract Services class with one method per service
  4. a registration table of every message

Usage:
    python generate_bindings.py vpe.api.json --output-dir generated/
    python generate_bindings.py --input-dir /usr/share/vpp/api/core -o generated/
"""

import sys
from pathlib import Path

# Add parent directory to path so binapigen package can be found
sys.path.insert(0, str(Path(__file__).parent.parent))

from binapigen.cli import main


if __name__ == "__main__":
    sys.exit(main())
