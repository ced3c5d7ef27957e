"""Core application infrastructure: XDG paths and theming."""
