"""Batched event cuts, diagram topologies, channel-weight tables and PDF/alpha_s grid tables."""

__version__ = "0.1.0"