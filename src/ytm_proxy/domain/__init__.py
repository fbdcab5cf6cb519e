"""Session domain: settings, playback and notifications."""
