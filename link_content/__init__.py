"""
Link Content Workflow.

Turns lists of source URLs into reviewed, AI-rewritten marketing content:
pages are extracted, rewritten through one of several AI providers, and
queued for human approval before publishing.
"""

__version__ = "1.0.0"
