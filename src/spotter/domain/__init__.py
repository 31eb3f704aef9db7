"""Domain operations on persisted records."""

from spotter.domain.mutators import Mutators, apply_profile_field, record_weight

__all__ = ["Mutators", "apply_profile_field", "record_weight"]
