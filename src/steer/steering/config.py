"""Configuration for steering aggregation."""

from __future__ import annotations

import dataclasses

import steer.config

DEFAULT_DOC_MAX_BYTES = 32 * 1024


@steer.config.configurable("steering")
@dataclasses.dataclass
class SteeringConfig:
    enabled: bool = True
    # Budget for headers + content of all injected steering files
    doc_max_bytes: int = DEFAULT_DOC_MAX_BYTES
