#!/usr/bin/env python3
"""
Entry point for the link content workflow API.

Runs the Flask application built by ``link_content.api.app.create_app``.
Host, port and debug mode come from HOST, PORT and DEBUG.
"""

import os

from link_content.api.app import run_app


if __name__ == '__main__':
    run_app(
        host=os.environ.get('HOST', '0.0.0.0'),
        port=int(os.environ.get('PORT', '5001')),
        debug=os.environ.get('DEBUG', 'false').lower() == 'true'
    )
