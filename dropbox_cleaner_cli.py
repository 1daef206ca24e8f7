#!/usr/bin/env python3
"""
Dropbox Cleaner - deletes old files from a Dropbox folder on a schedule.

Usage:
  1) Set DROPBOX_CLEANER_API_TOKEN (or put it in a .env file)
  2) Optionally set DROPBOX_CLEANER_APP_KEY / DROPBOX_CLEANER_APP_SECRET
     to authorize interactively and keep a refresh token
  3) Run: python dropbox_cleaner_cli.py --path "/Apps/Netatmo/Your Name" --dry
"""

import sys
from dropbox_cleaner.cli import main

if __name__ == "__main__":
    sys.exit(main())
