"""Utility modules for FlowDay."""
