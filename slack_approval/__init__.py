# Slack Approval Gate


def main():
    """Entry point for the slack-approval CLI command."""
    from slack_approval.app import run

    run()
