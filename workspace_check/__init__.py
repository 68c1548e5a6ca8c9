"""Workspace validation: runs the configured check matrix and reports one verdict."""
