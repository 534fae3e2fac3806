"""Clients for Puppet Enterprise APIs and an interactive PuppetDB shell."""

__version__ = "0.1.0"