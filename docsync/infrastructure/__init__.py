"""Infrastructure layer: concrete drivers and notifiers."""
