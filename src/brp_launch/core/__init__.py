"""Core logic for brp-launch: configuration, discovery, build and launch."""
