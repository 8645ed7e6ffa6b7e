"""Forward AppDynamics health rule violations to ServiceNow incidents."""

__version__ = "1.0.0"
