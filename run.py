#!/usr/bin/env python3
"""
Katalon Test Project Uploader

Run this script to upload a test project archive to Katalon Analytics.

Usage:
    python run.py upload project.zip -P 1234
    python run.py upload project.zip -s https://analytics.katalon.com -u me@example.com -p API_KEY -P 1234
    python run.py upload project.zip -P 1234 -v     # Log full requests/responses
    python run.py upload project.zip -P 1234 -q     # Summary only

Credentials default to KATALON_SERVER_URL, KATALON_EMAIL, KATALON_API_KEY
and KATALON_PROJECT_ID.
"""

import sys
from kit_uploader.cli import main

if __name__ == "__main__":
    sys.exit(main())
