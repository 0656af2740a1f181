"""Workflow nodes for the analysis stages."""
