"""Parsing, tree utilities and span editing."""
