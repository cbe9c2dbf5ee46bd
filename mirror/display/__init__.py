"""Display-side helpers for the kiosk process."""
