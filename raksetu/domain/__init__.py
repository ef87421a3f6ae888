# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the Raksetu platform.

Filtering, classification and distance functions are pure. Theme and locale
state transitions are pure as well; their side effects go through an
explicit store and document descriptor passed in by the caller.
"""
