"""
External service integrations for the link content workflow.

This module contains the AI provider clients and the interfaces of the
image gallery and publishing collaborators.
"""
