"""Audio sources and the tuner pipeline service."""
