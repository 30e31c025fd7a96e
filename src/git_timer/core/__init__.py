"""Timer core: state, duration log, history and git integration."""
