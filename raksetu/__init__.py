# SPDX-License-Identifier: Apache-2.0

"""
Raksetu API - blood-donation coordination back end.

Serves emergency blood-request listings with filtering, and owns each
client's theme and language preferences.
"""

__version__ = "1.0.0"
