"""Helpers for the Lambda entry point: event parsing, environment and secrets."""
