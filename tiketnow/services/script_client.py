#!/usr/bin/env python3
"""
Spreadsheet write access through the deployed Apps Script web app
"""

import logging
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)


def format_amount(value: float) -> str:
    """Render a number for a form field: 5000.0 -> '5000', 12.5 -> '12.5'"""
    return str(int(value)) if float(value).is_integer() else str(value)


class ScriptWriteClient:
    """
    Posts form-encoded actions to the script endpoint.

    Writes are fire-and-forget: the response body is never read and success
    is assumed once the request goes out. Transport failures are logged and
    reported as False, they are never raised to the caller.
    """

    def __init__(self, script_url: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.script_url = script_url
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.script_url)

    def post(self, action: Optional[str], fields: Dict[str, str]) -> bool:
        """Send one write; returns False only when the request could not be sent"""
        if not self.configured:
            logger.warning(f"Script URL not configured, skipping '{action or 'submit'}' write")
            return False

        data = {'action': action} if action else {}
        data.update({k: '' if v is None else str(v) for k, v in fields.items()})

        try:
            self.session.post(self.script_url, data=data, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Script write '{action or 'submit'}' failed: {e}")
            return False

        logger.info(f"Script write '{action or 'submit'}' sent")
        return True
