#!/usr/bin/env python3
"""
Convert res/design_document.md to res/design_document.pdf.

Runs the design_doc_pdf command line with its defaults; any arguments are
passed through.
"""

import sys

from design_doc_pdf.cli import main


if __name__ == "__main__":
    sys.exit(main())
