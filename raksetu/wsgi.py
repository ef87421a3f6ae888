# SPDX-License-Identifier: Apache-2.0

"""
WSGI entry point.

Run with any WSGI server, e.g. `gunicorn raksetu.wsgi:app`.
"""

import os

from .app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 5000)),
        debug=app.config['DEBUG']
    )
