"""Personal blog core: audited entities and hierarchical categories."""

__version__ = "0.1.0"
