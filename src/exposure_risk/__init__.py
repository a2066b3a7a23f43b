"""Personal exposure health-risk scoring for airborne particulate pollution."""

__version__ = "0.3.0"
