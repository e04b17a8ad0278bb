"""Redirect index construction and chain resolution."""
