# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

This package contains the error handling middleware of the Raksetu API.
"""
