"""
OCR Feedback Parser

Extracts typed feedback records (positive, needs improvement, observational)
from loosely structured text produced by OCR scanning of feedback sheets.
"""

__version__ = "1.0.0"
__author__ = "Vanguard Training Team"
