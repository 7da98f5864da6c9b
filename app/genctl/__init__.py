"""genctl - NixOS generation and Nix store management."""

__version__ = "0.1.0"
