#!/usr/bin/env python
"""CLI for the feedscore relevance pipeline."""

from feedscore.cli import main

if __name__ == "__main__":
    main()
