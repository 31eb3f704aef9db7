"""Flow registry, handler context and input parsing."""

from spotter.flow.context import Services, TurnContext
from spotter.flow.registry import FlowRegistry, FlowSpec

__all__ = ["FlowRegistry", "FlowSpec", "Services", "TurnContext"]
