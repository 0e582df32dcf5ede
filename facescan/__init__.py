"""FaceScan: find a reference face across a remote image folder, one bounded tick at a time."""

__version__ = "0.1.0"
