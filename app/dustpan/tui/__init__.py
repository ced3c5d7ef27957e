"""Interactive terminal session: key input, rendering, and the foreground loop."""
