"""Cleaning utilities for the pipeline.

Provides functions to normalize raw Superstore fields, parse dates with an
explicit format priority, derive calendar attributes, and validate the
prepared transactions before aggregation.
"""
