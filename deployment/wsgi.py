#!/usr/bin/env python3
"""
WSGI entry point for Tiket Now production deployment

    gunicorn deployment.wsgi:app

Settings come from the project .env (or TIKETNOW_ENV_FILE) through
load_project_config; nothing is read here.
"""

import sys
import os

# deployment/ is not a package, the project root has to be importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from tiketnow.config import load_project_config

app = create_app(load_project_config(os.getenv('TIKETNOW_ENV_FILE')))
app.config.update(DEBUG=False, TESTING=False)

if __name__ == "__main__":
    app.run()
