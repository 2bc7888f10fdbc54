"""ROM image building tools (ROMDIR, ROMVER, image assembly) and models of IOP kernel services."""

__version__ = "0.1.0"