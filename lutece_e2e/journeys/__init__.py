"""Ordered phases of the Lutece integration suite."""
