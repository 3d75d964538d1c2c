"""Settings applied to the logs exporter after it has been created."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ExporterConfig:
    """Size limits for log export.

    ``max_entry_size`` is the largest size in bytes of one log entry; larger
    entries are split. ``max_request_size`` is the largest size in bytes of one
    write request; larger requests are split.
    """

    max_entry_size: int = 0
    max_request_size: int = 0