"""Built-in flows."""

from spotter.flow.registry import FlowRegistry
from spotter.flows.admin import register_admin_flows
from spotter.flows.onboarding import register_onboarding_flows
from spotter.flows.profile import register_profile_flows
from spotter.flows.support import register_support_flows
from spotter.flows.tracking import register_tracking_flows


def build_flow_registry() -> FlowRegistry:
    """Registry holding every built-in step."""
    registry = FlowRegistry()
    register_onboarding_flows(registry)
    register_profile_flows(registry)
    register_tracking_flows(registry)
    register_support_flows(registry)
    register_admin_flows(registry)
    return registry


__all__ = ["build_flow_registry"]
