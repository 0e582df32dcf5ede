"""Serverless (AWS Lambda) entry point for the scan API."""
