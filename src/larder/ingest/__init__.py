"""Import helpers that turn external payloads into stored records."""
