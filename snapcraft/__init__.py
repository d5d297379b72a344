"""Backup repository, chunking, manifests, retention and restore helpers for Minecraft worlds."""

__version__ = "0.1.0"