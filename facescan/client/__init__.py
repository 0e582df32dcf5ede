"""
Client driver for the scan API.

Exports:
  - ClientDriver, DriverState, JobSnapshot: Continuation/polling loop
  - HttpJobTransport: requests-based API client
"""

from facescan.client.driver import ClientDriver, DriverState, JobSnapshot
from facescan.client.exceptions import (
    DriverBusyError,
    DriverGaveUpError,
    JobFailedError,
    TransportError,
)
from facescan.client.transport import HttpJobTransport

__all__ = [
    "ClientDriver",
    "DriverBusyError",
    "DriverGaveUpError",
    "DriverState",
    "HttpJobTransport",
    "JobFailedError",
    "JobSnapshot",
    "TransportError",
]
