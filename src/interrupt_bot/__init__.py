"""
Interrupt Bot (Lambda + Slack + Trello)

Where: AWS Lambda via Function URL (Slack Events API request URL).
What:  Keep a team roster of Slack handles -> Trello usernames and, when
       someone needs help, ping whoever is on the team board's Interrupt list.
Why:   One place to ask for help without knowing the current rotation.
"""

__all__ = [
    "config",
    "handler",
    "commands",
    "idempotency",
    "interrupt",
    "roster",
    "slack",
    "trello",
]
