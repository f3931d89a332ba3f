"""Ssh config parsing, session bootstrap over ssh, tunnel specs, terminals and CLI helpers for a remote shell."""

__version__ = "0.1.0"