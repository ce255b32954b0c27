"""Topology — extract keyboard hardware structure from ZMK config text.

Submodules:
  models         Immutable topology dataclasses and TopologyError.
  text           Comment stripping and structural devicetree scanning.
  context        Mutable state threaded through the extraction passes.
  shields        Shield names from build.yaml, filename attribution.
  layout         Physical key geometry (&key_physical_attrs).
  transform      Matrix map (RC(r,c)) and per-shield offsets.
  pins           Wiring mode, GPIO pin lists, diode polarity.
  builder        Pass orchestration (build_topology).
  serialization  JSON conversion (topology_to_dict, parse_topology).
"""

from .models import (
    PhysicalKey, MatrixEntry, PinAssignment, Shield, KeyboardTopology,
    TopologyError,
)
from .builder import build_topology, is_source_file
from .serialization import topology_to_dict, parse_topology

__all__ = [
    # Models
    "PhysicalKey", "MatrixEntry", "PinAssignment", "Shield",
    "KeyboardTopology", "TopologyError",
    # Builder
    "build_topology", "is_source_file",
    # Serialization
    "topology_to_dict", "parse_topology",
]
