"""
chart-synth builds Kubernetes manifests as a tree of named charts and
synthesizes each chart to its own document on disk.
"""

__all__ = [
    "chart",
    "config",
    "exceptions",
    "kustomize",
    "manifest",
    "sample",
    "synth",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
