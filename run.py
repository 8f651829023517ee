#!/usr/bin/env python3
"""Convenience script to run the Slack approval gate."""

from slack_approval.app import run as main

if __name__ == "__main__":
    main()
