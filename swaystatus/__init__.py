"""Status bar building blocks for sway: IPC client, bar visibility, workspaces, window title, binding mode, keyboard layout, clock and network state."""

__version__ = "0.1.0"