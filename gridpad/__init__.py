# Gridpad Launcher Package
"""
Launchpad-style application grid for Ignis/Wayland.

  - engine: layout store, drop resolver, hover timer, discovery sync
  - services: discovery, persistence, folder watching, LaunchpadService
  - panels: the GTK grid window and folder pop-over
"""

__version__ = "0.1.0.dev0"
