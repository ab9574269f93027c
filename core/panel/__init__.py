"""Panel services: icon renditions, the icon cache, and per-user panel configuration."""
