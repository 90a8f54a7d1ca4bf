"""MIDI Scale Detector - key, scale and chord analysis for Standard MIDI Files."""

__version__ = "0.1.0"
