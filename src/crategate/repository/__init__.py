"""Manifest retrieval from git hosts and local directories."""
