"""Builders de payload outbound por canal."""
