"""Messaging channels for reports."""

from psm_monitor.notify.slack import NotifierError, SlackNotifier, check_slack_response


__all__ = ["NotifierError", "SlackNotifier", "check_slack_response"]
